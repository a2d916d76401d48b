"""Assembles JSON-described MIPS-style programs into memory."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union

from .memory_manager import MemoryManager
from .process import ProcessContext

logger = logging.getLogger(__name__)

OPCODES: Dict[str, int] = {
    "add": 0, "sub": 0, "and": 0, "or": 0, "mult": 0, "div": 0, "sll": 0, "srl": 0, "jr": 0,
    "addi": 0b001000, "andi": 0b001100, "ori": 0b001101, "slti": 0b001010,
    "lw": 0b100011, "sw": 0b101011, "beq": 0b000100, "bne": 0b000101,
    "bgt": 0b000111, "blt": 0b001001, "li": 0b001111, "print": 0b111110, "end": 0b111111,
    "j": 0b000010, "jal": 0b000011,
}

FUNCTS: Dict[str, int] = {
    "add": 0b100000, "sub": 0b100010, "and": 0b100100, "or": 0b100101,
    "mult": 0b011000, "div": 0b011010, "sll": 0b000000, "srl": 0b000010, "jr": 0b001000,
}

REGISTERS: Dict[str, int] = {
    "$zero": 0, "$at": 1, "$v0": 2, "$v1": 3,
    "$a0": 4, "$a1": 5, "$a2": 6, "$a3": 7,
    "$t0": 8, "$t1": 9, "$t2": 10, "$t3": 11, "$t4": 12, "$t5": 13, "$t6": 14, "$t7": 15,
    "$s0": 16, "$s1": 17, "$s2": 18, "$s3": 19, "$s4": 20, "$s5": 21, "$s6": 22, "$s7": 23,
    "$t8": 24, "$t9": 25, "$k0": 26, "$k1": 27, "$gp": 28, "$sp": 29, "$fp": 30, "$ra": 31,
}

_BRANCHES = frozenset({"beq", "bne", "bgt", "blt"})
_JUMPS = frozenset({"j", "jal"})

_DECIMAL_PREFIX = re.compile(r"\s*([+-]?\d+)")
_HEX_PREFIX = re.compile(r"\s*([+-]?)(?:0x)?([0-9a-f]+)")
_AUTO_BASE_PREFIX = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")

_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1


class AssemblerError(ValueError):
    """Raised when a program document cannot be assembled."""


@dataclass
class LoadResult:
    """Outcome of loading one program document."""

    end_address: int
    labels: Dict[str, int] = field(default_factory=dict)
    data_labels: Dict[str, int] = field(default_factory=dict)


def _to_int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _parse_decimal(text: str) -> int:
    match = _DECIMAL_PREFIX.match(text)
    if match is None:
        raise AssemblerError(f"invalid integer: {text!r}")
    value = int(match.group(1))
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise AssemblerError(f"integer out of range: {text!r}")
    return value


def _parse_hex(text: str) -> int:
    match = _HEX_PREFIX.match(text.lower())
    if match is None:
        raise AssemblerError(f"invalid hexadecimal number: {text!r}")
    sign, digits = match.groups()
    value = int(digits, 16)
    return -value if sign == "-" else value


def _parse_auto_base(text: str) -> int:
    """Parse the leading number of ``text`` with C-style base detection."""
    match = _AUTO_BASE_PREFIX.match(text)
    if match is None:
        raise AssemblerError(f"invalid number: {text!r}")
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    return -value if sign == "-" else value


def _json_int(value: Any) -> int:
    if isinstance(value, (int, float)):
        return int(value)
    raise AssemblerError(f"expected a number, got {value!r}")


def _field(node: Mapping[str, Any], key: str) -> Any:
    try:
        return node[key]
    except KeyError:
        raise AssemblerError(f"missing field {key!r}") from None


def _string_field(node: Mapping[str, Any], key: str) -> str:
    value = _field(node, key)
    if not isinstance(value, str):
        raise AssemblerError(f"field {key!r} must be a string")
    return value


def _data_word(value: Any) -> int:
    return _parse_auto_base(value) if isinstance(value, str) else _json_int(value)


def parse_immediate(value: Any) -> int:
    """Parse a decimal or 0x-prefixed immediate and truncate it to 16 signed bits."""
    if isinstance(value, str):
        text = value.lower()
        if text.startswith("0x"):
            return _to_int16(_parse_hex(text))
        return _to_int16(_parse_decimal(text))
    return _to_int16(_json_int(value))


def parse_offset_base(expression: str) -> Tuple[int, int]:
    """Split ``offset($reg)`` into a 16-bit offset and a register number."""
    left = expression.find("(")
    right = expression.find(")")
    if left < 0 or right < 0 or right <= left + 1:
        raise AssemblerError(f"invalid address: {expression}")
    offset = _to_int16(_parse_decimal(expression[:left]))
    base = expression[left + 1:right]
    code = REGISTERS.get(base.lower())
    if code is None:
        raise AssemblerError(f"invalid base register: {base}")
    return offset, code


def register_code(name: str) -> int:
    """Return the number of a ``$``-prefixed register name."""
    code = REGISTERS.get(name.lower())
    if code is None:
        raise AssemblerError(f"unknown register: {name}")
    return code


def opcode_for(mnemonic: str) -> int:
    """Return the opcode of a mnemonic."""
    code = OPCODES.get(mnemonic.lower())
    if code is None:
        raise AssemblerError(f"unknown instruction: {mnemonic}")
    return code


def funct_for(mnemonic: str) -> int:
    """Return the R-type function code of a mnemonic, or 0."""
    return FUNCTS.get(mnemonic.lower(), 0)


def build_instruction(opcode: int, rs: int, rt: int, rd: int, shamt: int,
                      funct: int, immediate: int, address: int) -> int:
    """Pack instruction fields into a 32-bit word (R, J or I format by opcode)."""
    word = (opcode & 0x3F) << 26
    if opcode == 0:
        word |= (rs & 0x1F) << 21
        word |= (rt & 0x1F) << 16
        word |= (rd & 0x1F) << 11
        word |= (shamt & 0x1F) << 6
        word |= funct & 0x3F
    elif opcode in (0b000010, 0b000011):
        word |= address & 0x03FFFFFF
    else:
        word |= (rs & 0x1F) << 21
        word |= (rt & 0x1F) << 16
        word |= immediate & 0xFFFF
    return word


class Assembler:
    """Encodes instructions, resolving code and data labels it has seen."""

    def __init__(self) -> None:
        self.labels: Dict[str, int] = {}
        self.data_labels: Dict[str, int] = {}

    def reset(self) -> None:
        """Forget all code and data labels."""
        self.labels.clear()
        self.data_labels.clear()

    def _label(self, name: str, kind: str) -> int:
        try:
            return self.labels[name]
        except KeyError:
            raise AssemblerError(f"unknown {kind} label: {name}") from None

    def _encode_r(self, node: Mapping[str, Any], mnemonic: str) -> int:
        opcode = opcode_for(mnemonic)
        funct = funct_for(mnemonic)
        rs = rt = rd = shamt = 0
        if mnemonic in ("sll", "srl"):
            rd = register_code(_string_field(node, "rd"))
            rt = register_code(_string_field(node, "rt"))
            shamt = parse_immediate(_field(node, "shamt"))
        elif mnemonic == "jr":
            rs = register_code(_string_field(node, "rs"))
        else:
            rd = register_code(_string_field(node, "rd"))
            rs = register_code(_string_field(node, "rs"))
            rt = register_code(_string_field(node, "rt"))
        return build_instruction(opcode, rs, rt, rd, shamt, funct, 0, 0)

    def _encode_memory(self, node: Mapping[str, Any], opcode: int) -> int:
        rt = register_code(_string_field(node, "rt"))
        if "addr" in node:
            imm, rs = parse_offset_base(_string_field(node, "addr"))
        elif "baseReg" in node:
            rs = register_code(_string_field(node, "baseReg"))
            imm = parse_immediate(node["offset"]) if "offset" in node else 0
        elif "base" in node:
            rs = register_code("$zero")
            label = _string_field(node, "base")
            if label not in self.data_labels:
                raise AssemblerError(f"unknown data label: {label}")
            offset = parse_immediate(node["offset"]) if "offset" in node else 0
            imm = _to_int16((self.data_labels[label] + offset) & 0xFFFF)
        else:
            raise AssemblerError("lw/sw need 'addr', 'baseReg' or 'base'")
        return build_instruction(opcode, rs, rt, 0, 0, 0, imm, 0)

    def _encode_branch(self, node: Mapping[str, Any], mnemonic: str, opcode: int) -> int:
        rs = register_code(_string_field(node, "rs"))
        rt = register_code(_string_field(node, "rt"))
        target = ""
        if "label1" in node:
            target = _string_field(node, "label1")
        elif "label" in node:
            target = _string_field(node, "label")
        if target:
            imm = _to_int16(self._label(target, "branch"))
        elif "offset" in node:
            imm = parse_immediate(node["offset"])
        else:
            raise AssemblerError(f"{mnemonic} needs a target ('label' or 'label1') or 'offset'")
        return build_instruction(opcode, rs, rt, 0, 0, 0, imm, 0)

    def _encode_i(self, node: Mapping[str, Any], mnemonic: str) -> int:
        opcode = opcode_for(mnemonic)
        if mnemonic == "li":
            rt = register_code(_string_field(node, "rt"))
            imm = parse_immediate(_field(node, "immediate"))
            return build_instruction(opcode_for("addi"), register_code("$zero"), rt, 0, 0, 0, imm, 0)
        if mnemonic in ("lw", "sw"):
            return self._encode_memory(node, opcode)
        if mnemonic in _BRANCHES:
            return self._encode_branch(node, mnemonic, opcode)
        rt = register_code(_string_field(node, "rt"))
        rs = register_code(_string_field(node, "rs"))
        imm = parse_immediate(_field(node, "immediate"))
        return build_instruction(opcode, rs, rt, 0, 0, 0, imm, 0)

    def _encode_j(self, node: Mapping[str, Any], mnemonic: str) -> int:
        opcode = opcode_for(mnemonic)
        if "label" in node or "label1" in node:
            name = _string_field(node, "label1" if "label1" in node else "label")
            address = self._label(name, "jump") & 0x03FFFFFF
            return build_instruction(opcode, 0, 0, 0, 0, 0, 0, address)
        if "address" in node:
            raw = node["address"]
            if isinstance(raw, str):
                text = raw.lower()
                address = _parse_hex(text) if text.startswith("0x") else _parse_decimal(text)
            else:
                address = _json_int(raw)
            return build_instruction(opcode, 0, 0, 0, 0, 0, 0, address & 0x03FFFFFF)
        raise AssemblerError("J-type needs 'label' or 'address'")

    def encode(self, instruction: Mapping[str, Any]) -> int:
        """Encode one instruction object into a 32-bit word."""
        mnemonic = _string_field(instruction, "instruction")
        if mnemonic in ("end", "print"):
            return opcode_for(mnemonic) << 26
        if mnemonic in FUNCTS:
            return self._encode_r(instruction, mnemonic)
        if mnemonic in _JUMPS:
            return self._encode_j(instruction, mnemonic)
        return self._encode_i(instruction, mnemonic)

    def parse_data(self, data: Any, memory: MemoryManager, process: ProcessContext,
                   start_address: int) -> int:
        """Write the data section to memory and return the next free address."""
        address = start_address
        if isinstance(data, dict):
            for key in sorted(data):
                self.data_labels[key] = address
                value = data[key]
                for item in value if isinstance(value, list) else [value]:
                    memory.write(address, _data_word(item), process)
                    address += 4
            return address
        if isinstance(data, list):
            for item in data:
                if not isinstance(item, dict):
                    raise AssemblerError("data items must be objects")
                label = item.get("label", "")
                if label:
                    self.data_labels[label] = address
                value = _field(item, "value")
                for element in value if isinstance(value, list) else [value]:
                    memory.write(address, _data_word(element), process)
                    address += 4
        return address

    def parse_program(self, program: Any, memory: MemoryManager, process: ProcessContext,
                      start_address: int) -> int:
        """Resolve labels, set the process's PC, write the code and return the next address."""
        if not isinstance(program, list):
            return start_address
        instructions = [node for node in program if isinstance(node, dict) and "instruction" in node]

        address = start_address
        for node in instructions:
            mnemonic = _string_field(node, "instruction").lower()
            if "label" in node:
                is_branch = mnemonic in _JUMPS or mnemonic in _BRANCHES
                if not is_branch or "label1" in node:
                    self.labels[_string_field(node, "label")] = address
            address += 4

        process.burst_time = len(instructions)
        process.program_counter = self.labels.get("start", start_address)
        logger.info("pid %d loaded, initial pc = %d", process.pid, process.program_counter)

        address = start_address
        for node in instructions:
            memory.write(address, self.encode(node), process)
            address += 4
        return address

    def load(self, document: Mapping[str, Any], memory: MemoryManager, process: ProcessContext,
             start_address: int = 0) -> LoadResult:
        """Load a whole program document, starting from fresh label tables."""
        self.reset()
        address = start_address
        if "data" in document:
            address = self.parse_data(document["data"], memory, process, address)
        if "program" in document:
            address = self.parse_program(document["program"], memory, process, address)
        return LoadResult(address, dict(self.labels), dict(self.data_labels))

    def load_file(self, path: Union[str, Path], memory: MemoryManager, process: ProcessContext,
                  start_address: int = 0) -> LoadResult:
        """Read a JSON program file and load it."""
        try:
            with open(path, encoding="utf-8") as handle:
                document = json.load(handle)
        except OSError as exc:
            raise AssemblerError(f"cannot open: {path}") from exc
        except json.JSONDecodeError as exc:
            raise AssemblerError(f"invalid JSON in {path}: {exc}") from exc
        if not isinstance(document, dict):
            raise AssemblerError(f"{path} does not hold a JSON object")
        return self.load(document, memory, process, start_address)


def load_program(path: Union[str, Path], memory: MemoryManager, process: ProcessContext,
                 start_address: int = 0) -> LoadResult:
    """Load the program file at ``path`` into ``memory`` for ``process``."""
    return Assembler().load_file(path, memory, process, start_address)