"""
Atom tree to LaTeX.

Normalizations (parsing the output gives back an equal tree):
- Scripts are always braced: x^{2}, a_{i}
- A control word is separated from a following letter by a space (\\alpha x)
- Placeholders are written as \\placeholder{}
- Autocomplete suggestion atoms are left out
"""

import re
from typing import List

from .atom import Atom, AtomKind

_CONTROL_WORD_END = re.compile(r"\\[a-zA-Z]+$")


class LatexWriter:
    """Accumulates LaTeX fragments, inserting separators where needed."""

    def __init__(self):
        self.parts: List[str] = []

    def write(self, text: str):
        if not text:
            return
        if self.parts and text[0].isalpha() and text[0].isascii():
            if _CONTROL_WORD_END.search(self.parts[-1]):
                self.parts.append(' ')
        self.parts.append(text)

    def getvalue(self) -> str:
        return ''.join(self.parts)


def to_latex(atoms: List[Atom], include_suggestions: bool = False) -> str:
    """Serialize an atom forest."""
    writer = LatexWriter()
    _write_list(writer, atoms, include_suggestions)
    return writer.getvalue()


def atom_to_latex(atom: Atom, include_suggestions: bool = False) -> str:
    writer = LatexWriter()
    _write_atom(writer, atom, include_suggestions)
    return writer.getvalue()


def _write_list(writer: LatexWriter, atoms: List[Atom], include_suggestions: bool):
    for atom in atoms:
        if atom.is_suggestion and not include_suggestions:
            continue
        _write_atom(writer, atom, include_suggestions)


def _write_braced(writer: LatexWriter, atoms: List[Atom], include_suggestions: bool):
    writer.write('{')
    _write_list(writer, atoms, include_suggestions)
    writer.write('}')


def _write_atom(writer: LatexWriter, atom: Atom, include_suggestions: bool):
    kind = atom.kind

    if kind == AtomKind.ROOT:
        _write_list(writer, atom.children, include_suggestions)
        return

    if kind == AtomKind.PLACEHOLDER:
        writer.write(r'\placeholder{}')
    elif kind == AtomKind.GROUP:
        _write_braced(writer, atom.children, include_suggestions)
    elif kind == AtomKind.FRACTION:
        writer.write(atom.value or r'\frac')
        _write_braced(writer, atom.numerator, include_suggestions)
        _write_braced(writer, atom.denominator, include_suggestions)
    elif kind == AtomKind.RADICAL:
        writer.write(atom.value or r'\sqrt')
        if atom.index:
            writer.write('[')
            _write_list(writer, atom.index, include_suggestions)
            writer.write(']')
        _write_braced(writer, atom.radicand, include_suggestions)
    elif kind in (AtomKind.ACCENT, AtomKind.FONT):
        writer.write(atom.value)
        _write_braced(writer, atom.children, include_suggestions)
    elif kind == AtomKind.LEFTRIGHT:
        writer.write(r'\left')
        writer.write(atom.value or '.')
        _write_list(writer, atom.children, include_suggestions)
        writer.write(r'\right')
        writer.write(atom.right or '.')
    elif kind == AtomKind.ARRAY:
        writer.write(r'\begin{' + atom.value + '}')
        _write_list(writer, atom.children, include_suggestions)
        writer.write(r'\end{' + atom.value + '}')
    elif kind == AtomKind.ALIGN:
        writer.write(atom.value)
    else:
        # Symbols, text, spacing, command and error atoms
        writer.write(atom.value)

    if atom.superscript is not None:
        writer.write('^')
        _write_braced(writer, atom.superscript, include_suggestions)
    if atom.subscript is not None:
        writer.write('_')
        _write_braced(writer, atom.subscript, include_suggestions)
