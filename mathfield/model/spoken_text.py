"""
Spoken (accessible) text for an atom tree.

    x^2+1            -> "x squared plus one"
    \\frac{1}{2}      -> "the fraction one over two, end fraction"
    \\sqrt{x}         -> "the square root of x, end root"
    \\sum_{i=1}^{n} i -> "the sum from i equals one to n of i"
"""

import re
from typing import List, Optional

from ..data.symbol_table import CHAR_SPEECH, speech_for
from .atom import Atom, AtomKind

DIGIT_WORDS = ['zero', 'one', 'two', 'three', 'four',
               'five', 'six', 'seven', 'eight', 'nine']

# Operators whose scripts read as limits
LIMIT_OPERATORS = {r"\sum", r"\prod", r"\coprod", r"\int", r"\iint", r"\iiint",
                   r"\oint", r"\bigcup", r"\bigcap", r"\lim", r"\limsup", r"\liminf",
                   r"\max", r"\min", r"\sup", r"\inf"}

FONT_WORDS = {
    r"\mathbb": "blackboard",
    r"\mathcal": "calligraphic",
    r"\mathfrak": "fraktur",
    r"\mathscr": "script",
}


def to_speakable_text(atoms: List[Atom]) -> str:
    """Spoken form of an atom forest (or of a root atom's body)."""
    if len(atoms) == 1 and atoms[0].kind == AtomKind.ROOT:
        atoms = atoms[0].children
    text = _speak_list(atoms)
    return re.sub(r'\s+', ' ', text).strip()


def _speak_number(digits: str) -> str:
    if len(digits) == 1 and digits.isdigit():
        return DIGIT_WORDS[int(digits)]
    return digits


def _speak_list(atoms: List[Atom]) -> str:
    words: List[str] = []
    i = 0
    while i < len(atoms):
        atom = atoms[i]
        # Runs of digits read as one number, scripts on the last digit apply to it
        if _is_digit(atom):
            j = i + 1
            while j < len(atoms) and _is_digit(atoms[j]) and not atoms[j - 1].has_scripts:
                j += 1
            number = _speak_number("".join(a.value for a in atoms[i:j]))
            words.append(_speak_atom(atoms[j - 1], number))
            i = j
            continue
        words.append(_speak_atom(atom))
        i += 1
    return ' '.join(w for w in words if w)


def _is_digit(atom: Atom) -> bool:
    return atom.kind == AtomKind.ORD and (atom.value.isdigit() or atom.value == '.')


def _speak_body(atom: Atom) -> str:
    if atom.kind == AtomKind.ORD and atom.value.isdigit():
        return _speak_number(atom.value)
    if atom.kind in (AtomKind.ORD, AtomKind.BIN, AtomKind.REL, AtomKind.OPEN,
                     AtomKind.CLOSE, AtomKind.PUNCT, AtomKind.OP):
        return speech_for(atom.value)
    if atom.kind == AtomKind.TEXT:
        return atom.value
    if atom.kind == AtomKind.PLACEHOLDER:
        return "placeholder"
    if atom.kind == AtomKind.GROUP:
        return _speak_list(atom.children)
    if atom.kind == AtomKind.FRACTION:
        return (f"the fraction {_speak_list(atom.numerator)} "
                f"over {_speak_list(atom.denominator)}, end fraction")
    if atom.kind == AtomKind.RADICAL:
        radicand = _speak_list(atom.radicand)
        if not atom.index:
            return f"the square root of {radicand}, end root"
        index = _speak_list(atom.index)
        if index == "three":
            return f"the cube root of {radicand}, end root"
        return f"the root of index {index} of {radicand}, end root"
    if atom.kind == AtomKind.ACCENT:
        return f"{speech_for(atom.value)} {_speak_list(atom.children)}"
    if atom.kind == AtomKind.FONT:
        word = FONT_WORDS.get(atom.value)
        body = _speak_list(atom.children)
        return f"{word} {body}" if word else body
    if atom.kind == AtomKind.LEFTRIGHT:
        left = CHAR_SPEECH.get(atom.value, speech_for(atom.value)) if atom.value != '.' else ''
        right = CHAR_SPEECH.get(atom.right, speech_for(atom.right)) if atom.right != '.' else ''
        return f"{left} {_speak_list(atom.children)} {right}"
    if atom.kind == AtomKind.ARRAY:
        return _speak_array(atom)
    # Command, error, spacing and alignment atoms are silent
    return ''


def _speak_array(atom: Atom) -> str:
    rows: List[List[List[Atom]]] = [[[]]]
    for child in atom.children:
        if child.kind == AtomKind.ALIGN:
            if child.value == '&':
                rows[-1].append([])
            else:
                rows.append([[]])
        else:
            rows[-1][-1].append(child)
    spoken_rows = []
    for n, row in enumerate(rows, 1):
        cells = ', '.join(_speak_list(cell) for cell in row)
        spoken_rows.append(f"row {n}: {cells}")
    return f"the matrix, {'; '.join(spoken_rows)}, end matrix"


def _speak_atom(atom: Atom, body: Optional[str] = None) -> str:
    if body is None:
        body = _speak_body(atom)

    if atom.kind == AtomKind.OP and atom.value in LIMIT_OPERATORS:
        if atom.subscript is not None:
            body += f" from {_speak_list(atom.subscript)}"
        if atom.superscript is not None:
            body += f" to {_speak_list(atom.superscript)}"
        if atom.has_scripts and atom.value not in (r"\lim", r"\limsup", r"\liminf"):
            body += " of"
        return body

    if atom.subscript is not None:
        body += f" sub {_speak_list(atom.subscript)}"
    if atom.superscript is not None:
        sup = atom.superscript
        if len(sup) == 1 and sup[0].value == '2' and not sup[0].has_scripts:
            body += " squared"
        elif len(sup) == 1 and sup[0].value == '3' and not sup[0].has_scripts:
            body += " cubed"
        else:
            body += f" to the power of {_speak_list(sup)}, end exponent"
    return body
