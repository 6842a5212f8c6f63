"""
Box Layout Engine

Turns an atom tree into an immutable tree of Boxes with TeX-like metrics.

All lengths are in em of the base font size. A box has:
- width: horizontal advance
- height: extent above its baseline
- depth: extent below its baseline
- x, y: offset of the box inside its parent (y is a baseline shift, positive up)

Composition follows the TeXbook appendix G rules:
- Rule 11: radicals (surd sized to the radicand, rule above it)
- Rule 12: accents (mark centered above the body)
- Rule 13: large operators (enlarged in display style, limits above/below)
- Rule 15: fractions (numerator/denominator shifts, clearance around the bar)
- Rule 18: superscripts and subscripts (shared script column)

The layout is a pure function of (atoms, style). The only atom state it reads
besides content are the presentation flags set by the editor before a pass
(has_caret, caret_leading, is_selected).
"""

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..data.symbol_table import ENVIRONMENTS, glyph_for
from .atom import Atom, AtomKind


# =============================================================================
# Styles and Font Parameters
# =============================================================================

class MathStyle(IntEnum):
    """TeX math styles, from largest to smallest."""
    DISPLAY = 0
    TEXT = 1
    SCRIPT = 2
    SCRIPTSCRIPT = 3

    @property
    def size(self) -> float:
        return SIZE_MULTIPLIERS[self]

    @property
    def is_tight(self) -> bool:
        return self >= MathStyle.SCRIPT

    def sup(self) -> 'MathStyle':
        return MathStyle.SCRIPT if self <= MathStyle.TEXT else MathStyle.SCRIPTSCRIPT

    def sub(self) -> 'MathStyle':
        return self.sup()

    def frac_num(self) -> 'MathStyle':
        return MathStyle(min(self + 1, MathStyle.SCRIPTSCRIPT))

    def frac_den(self) -> 'MathStyle':
        return self.frac_num()

    @classmethod
    def parse(cls, name: Union[str, 'MathStyle']) -> 'MathStyle':
        if isinstance(name, MathStyle):
            return name
        return cls[name.upper().replace('STYLE', '')]


SIZE_MULTIPLIERS = {
    MathStyle.DISPLAY: 1.0,
    MathStyle.TEXT: 1.0,
    MathStyle.SCRIPT: 0.7,
    MathStyle.SCRIPTSCRIPT: 0.5,
}

# TeX font parameters (sigma table of cmsy10, cmex10), in em
SIGMAS = {
    'x_height': 0.431,
    'quad': 1.0,
    'num1': 0.677,
    'num2': 0.394,
    'denom1': 0.686,
    'denom2': 0.345,
    'sup1': 0.413,
    'sup2': 0.363,
    'sup3': 0.289,
    'sub1': 0.150,
    'sub2': 0.247,
    'sup_drop': 0.386,
    'sub_drop': 0.050,
    'axis_height': 0.250,
    'rule_thickness': 0.040,
    'big_op_spacing1': 0.111,
    'big_op_spacing2': 0.166,
    'big_op_spacing3': 0.200,
    'big_op_spacing4': 0.600,
    'big_op_spacing5': 0.100,
    'null_delimiter_space': 0.120,
    'script_space': 0.050,
    'array_col_sep': 0.500,
    'jot': 0.120,
}

# Inter-atom spacing in mu (1/18 em): thin=3, medium=4, thick=5
SPACINGS: Dict[Tuple[str, str], int] = {
    ('mord', 'mop'): 3, ('mord', 'mbin'): 4, ('mord', 'mrel'): 5,
    ('mop', 'mord'): 3, ('mop', 'mop'): 3, ('mop', 'mrel'): 5,
    ('mbin', 'mord'): 4, ('mbin', 'mop'): 4, ('mbin', 'mopen'): 4,
    ('mrel', 'mord'): 5, ('mrel', 'mop'): 5, ('mrel', 'mopen'): 5,
    ('mclose', 'mop'): 3, ('mclose', 'mbin'): 4, ('mclose', 'mrel'): 5,
    ('mpunct', 'mord'): 3, ('mpunct', 'mop'): 3, ('mpunct', 'mrel'): 3,
    ('mpunct', 'mopen'): 3, ('mpunct', 'mclose'): 3, ('mpunct', 'mpunct'): 3,
}

# Spacing kept in script styles
TIGHT_SPACINGS = {('mord', 'mop'), ('mop', 'mord'), ('mop', 'mop'), ('mclose', 'mop')}

SPACING_WIDTHS = {
    r'\,': 3 / 18, r'\:': 4 / 18, r'\;': 5 / 18, r'\!': -3 / 18,
    r'\ ': 0.25, r'\quad': 1.0, r'\qquad': 2.0,
}

# Operators with limits above and below in display style
LIMITS_OPERATORS = {r'\sum', r'\prod', r'\coprod', r'\bigcup', r'\bigcap',
                    r'\lim', r'\limsup', r'\liminf', r'\max', r'\min',
                    r'\sup', r'\inf', r'\det', r'\gcd', r'\Pr'}

WIDE_ACCENTS = {r'\widehat', r'\widetilde', r'\overrightarrow'}

# Nuclei whose scripts use the minimum shifts only (rule 18a)
CHARACTER_KINDS = {AtomKind.ORD, AtomKind.BIN, AtomKind.REL, AtomKind.OPEN,
                   AtomKind.CLOSE, AtomKind.PUNCT, AtomKind.TEXT,
                   AtomKind.PLACEHOLDER, AtomKind.COMMAND}

# Large operator glyph metrics: (width, height, depth) in text and display
LARGE_OPS = {
    '∑': ((1.056, 0.750, 0.250), (1.444, 1.000, 0.500)),
    '∏': ((0.944, 0.750, 0.250), (1.278, 1.000, 0.500)),
    '∐': ((0.944, 0.750, 0.250), (1.278, 1.000, 0.500)),
    '⋃': ((0.833, 0.750, 0.250), (1.111, 1.000, 0.500)),
    '⋂': ((0.833, 0.750, 0.250), (1.111, 1.000, 0.500)),
    '∫': ((0.556, 0.805, 0.306), (0.944, 1.360, 0.862)),
    '∬': ((0.889, 0.805, 0.306), (1.389, 1.360, 0.862)),
    '∭': ((1.222, 0.805, 0.306), (1.833, 1.360, 0.862)),
    '∮': ((0.556, 0.805, 0.306), (0.944, 1.360, 0.862)),
}


# =============================================================================
# Glyph Metrics
# =============================================================================

ASCENDERS = set('bdfhklt')
DESCENDERS = set('gjpqy')
NARROW = set('ijlrtf')
WIDE = set('mwMW')
GREEK_TALL = set('βδζθλξϑ')
GREEK_DEEP = set('βγζημξρφχψςϱϕ')
DELIMITERS = set('()[]{}|‖⟨⟩⌊⌋⌈⌉')
OPERATOR_CHARS = set('+−×÷±∓⋅∗⋆∘∙⊕⊗⊙∧∨∩∪∖⊔=<>≤≥≠≪≫≈≡∼≃≅∝∈∋∉⊂⊃⊆⊇→←⇒⇐⇔↔↦⟹⟺')


def char_metrics(char: str) -> Tuple[float, float, float]:
    """(width, height, depth) of one character at size 1."""
    if char.isdigit():
        return 0.5, 0.644, 0.0
    if char.isascii() and char.isalpha():
        width = 0.3 if char in NARROW else 0.8 if char in WIDE else 0.5
        if char.isupper():
            return max(width, 0.7), 0.683, 0.0
        height = 0.694 if char in ASCENDERS else 0.431
        depth = 0.194 if char in DESCENDERS else 0.0
        return width, height, depth
    if char in DELIMITERS:
        return 0.389, 0.75, 0.25
    if char in OPERATOR_CHARS:
        return 0.778, 0.583, 0.083
    if char in ',;':
        return 0.278, 0.106, 0.194
    if char in '.:!\'′':
        return 0.278, 0.431, 0.0
    if char == ' ':
        return 0.25, 0.0, 0.0
    if 'α' <= char <= 'ω' or char in 'ϵϑϖϱϕ':
        return 0.6, 0.694 if char in GREEK_TALL else 0.431, 0.194 if char in GREEK_DEEP else 0.0
    if 'Α' <= char <= 'Ω':
        return 0.75, 0.683, 0.0
    if char == '⬚':
        return 0.6, 0.683, 0.0
    return 0.6, 0.7, 0.0


def text_metrics(text: str) -> Tuple[float, float, float]:
    width = height = depth = 0.0
    for char in text:
        w, h, d = char_metrics(char)
        width += w
        height = max(height, h)
        depth = max(depth, d)
    return width, height, depth


# =============================================================================
# Boxes
# =============================================================================

@dataclass(frozen=True)
class Box:
    """A sized, positioned node of the layout tree."""
    width: float = 0.0
    height: float = 0.0
    depth: float = 0.0
    children: Tuple['Box', ...] = ()
    x: float = 0.0
    y: float = 0.0
    classes: Tuple[str, ...] = ()
    atom_id: Optional[int] = None
    text: str = ""

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def walk(self):
        """Depth-first iteration over this box and its descendants."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, class_name: str) -> List['Box']:
        return [b for b in self.walk() if class_name in b.classes]

    def for_atom(self, atom_id: int) -> Optional['Box']:
        for b in self.walk():
            if b.atom_id == atom_id:
                return b
        return None


def glyph(text: str, style: MathStyle, classes: Sequence[str] = (),
          atom_id: Optional[int] = None) -> Box:
    w, h, d = text_metrics(text)
    m = style.size
    return Box(width=w * m, height=h * m, depth=d * m, classes=tuple(classes),
               atom_id=atom_id, text=text)


def kern(width: float) -> Box:
    return Box(width=width, classes=('ML__kern',))


def rule(width: float, thickness: float, y: float) -> Box:
    return Box(width=width, height=thickness, y=y, classes=('ML__rule',))


def hbox(children: Sequence[Box], classes: Sequence[str] = (),
         atom_id: Optional[int] = None) -> Box:
    """Place children left to right on a common baseline."""
    placed = []
    x = 0.0
    height = depth = 0.0
    for child in children:
        placed.append(replace(child, x=x))
        x += child.width
        height = max(height, child.height + child.y)
        depth = max(depth, child.depth - child.y)
    return Box(width=x, height=height, depth=depth, children=tuple(placed),
               classes=tuple(classes), atom_id=atom_id)


def stack(children: Sequence[Box], width: float, classes: Sequence[str] = (),
          atom_id: Optional[int] = None) -> Box:
    """Combine children already carrying their own x and y offsets."""
    height = max((c.height + c.y for c in children), default=0.0)
    depth = max((c.depth - c.y for c in children), default=0.0)
    return Box(width=width, height=max(height, 0.0), depth=max(depth, 0.0),
               children=tuple(children), classes=tuple(classes), atom_id=atom_id)


def caret_box(style: MathStyle) -> Box:
    m = style.size
    return Box(width=0.0, height=0.75 * m, depth=0.25 * m, classes=('ML__caret',))


# =============================================================================
# Layout
# =============================================================================

def spacing_class(atom: Atom) -> Optional[str]:
    """TeX atom class used for inter-atom spacing (None: no spacing)."""
    if atom.kind in (AtomKind.SPACING, AtomKind.ALIGN):
        return None
    if atom.kind in (AtomKind.ORD, AtomKind.BIN, AtomKind.REL, AtomKind.OPEN,
                     AtomKind.CLOSE, AtomKind.PUNCT, AtomKind.OP):
        return atom.kind.value
    return 'mord'


def _adjusted_classes(atoms: List[Atom]) -> List[Optional[str]]:
    """Spacing classes with misplaced binary operators turned into ordinary."""
    classes = [spacing_class(a) for a in atoms]
    previous = None
    for i, cls in enumerate(classes):
        if cls is None:
            continue
        if cls == 'mbin' and previous in (None, 'mbin', 'mop', 'mrel', 'mopen', 'mpunct'):
            classes[i] = 'mord'
        if classes[i] in ('mrel', 'mclose', 'mpunct') and previous == 'mbin':
            # The binary operator before a relation is ordinary
            for j in range(i - 1, -1, -1):
                if classes[j] is not None:
                    classes[j] = 'mord'
                    break
        previous = classes[i]
    # A trailing binary operator is ordinary
    for j in range(len(classes) - 1, -1, -1):
        if classes[j] is not None:
            if classes[j] == 'mbin':
                classes[j] = 'mord'
            break
    return classes


class LayoutEngine:
    """Recursive layout of atom lists."""

    def __init__(self, style: MathStyle = MathStyle.DISPLAY):
        self.style = style

    def layout_list(self, atoms: Optional[List[Atom]], style: MathStyle,
                    classes: Sequence[str] = ()) -> Box:
        atoms = atoms or []
        spacing = _adjusted_classes(atoms)
        boxes: List[Box] = []
        previous = None
        for atom, cls in zip(atoms, spacing):
            if cls is not None and previous is not None:
                mu = SPACINGS.get((previous, cls), 0)
                if mu and (not style.is_tight or (previous, cls) in TIGHT_SPACINGS):
                    boxes.append(kern(mu / 18 * style.size))
            if atom.caret_leading:
                boxes.append(caret_box(style))
            boxes.append(self.layout_atom(atom, style))
            if atom.has_caret:
                boxes.append(caret_box(style))
            if cls is not None:
                previous = cls
        return hbox(boxes, classes)

    def layout_atom(self, atom: Atom, style: MathStyle) -> Box:
        classes = self.atom_classes(atom)
        if atom.kind == AtomKind.OP and atom.has_scripts and style == MathStyle.DISPLAY \
                and atom.value in LIMITS_OPERATORS:
            return self.layout_limits(atom, style, classes)

        nucleus = self.layout_nucleus(atom, style, classes)
        if not atom.has_scripts:
            return nucleus
        return self.layout_scripts(atom, nucleus, style, classes)

    def atom_classes(self, atom: Atom) -> Tuple[str, ...]:
        classes = [atom.kind.value]
        if atom.is_selected:
            classes.append('ML__selected')
        if atom.is_placeholder:
            classes.append('ML__placeholder')
        if atom.kind == AtomKind.COMMAND:
            classes.append('ML__command')
        if atom.is_error:
            classes.append('ML__error')
        if atom.is_suggestion:
            classes.append('ML__suggestion')
        return tuple(classes)

    # -------------------------------------------------------------------------
    # Nucleus by kind
    # -------------------------------------------------------------------------

    def layout_nucleus(self, atom: Atom, style: MathStyle, classes: Tuple[str, ...]) -> Box:
        kind = atom.kind
        m = style.size

        if kind == AtomKind.GROUP:
            return replace(self.layout_list(atom.children, style, classes), atom_id=atom.identity)
        if kind == AtomKind.FONT:
            font_class = 'ML__' + atom.value.lstrip('\\')
            body = self.layout_list(atom.children, style, classes + (font_class,))
            return replace(body, atom_id=atom.identity)
        if kind == AtomKind.FRACTION:
            return self.layout_fraction(atom, style, classes)
        if kind == AtomKind.RADICAL:
            return self.layout_radical(atom, style, classes)
        if kind == AtomKind.ACCENT:
            return self.layout_accent(atom, style, classes)
        if kind == AtomKind.LEFTRIGHT:
            inner = self.layout_list(atom.children, style)
            return self.with_delimiters(inner, atom.value, atom.right, style, classes, atom.identity)
        if kind == AtomKind.ARRAY:
            return self.layout_array(atom, style, classes)
        if kind == AtomKind.SPACING:
            return Box(width=SPACING_WIDTHS.get(atom.value, 0.0) * m, classes=classes,
                       atom_id=atom.identity)
        if kind == AtomKind.ALIGN:
            return Box(classes=classes, atom_id=atom.identity)
        if kind == AtomKind.PLACEHOLDER:
            return glyph('⬚', style, classes, atom.identity)
        if kind == AtomKind.OP:
            return self.layout_operator(atom, style, classes)
        if kind in (AtomKind.COMMAND, AtomKind.ERROR, AtomKind.TEXT):
            return glyph(atom.value, style, classes, atom.identity)
        return glyph(glyph_for(atom.value), style, classes, atom.identity)

    def layout_operator(self, atom: Atom, style: MathStyle, classes: Tuple[str, ...]) -> Box:
        text = glyph_for(atom.value)
        if text not in LARGE_OPS:
            return glyph(text, style, classes, atom.identity)
        m = style.size
        (w, h, d) = LARGE_OPS[text][1 if style == MathStyle.DISPLAY else 0]
        # Center the symbol on the math axis (rule 13)
        shift = SIGMAS['axis_height'] * m - (h - d) * m / 2
        return Box(width=w * m, height=h * m, depth=d * m, y=shift,
                   classes=classes + ('ML__large-op',), atom_id=atom.identity, text=text)

    # -------------------------------------------------------------------------
    # Rule 18: scripts
    # -------------------------------------------------------------------------

    def layout_scripts(self, atom: Atom, base: Box, style: MathStyle,
                       classes: Tuple[str, ...]) -> Box:
        m = style.size
        sup_style, sub_style = style.sup(), style.sub()
        x_height = SIGMAS['x_height'] * m
        rule_width = SIGMAS['rule_thickness'] * m

        sup = self.layout_list(atom.superscript, sup_style, ('ML__sup',)) \
            if atom.superscript is not None else None
        sub = self.layout_list(atom.subscript, sub_style, ('ML__sub',)) \
            if atom.subscript is not None else None

        base_height = base.height + base.y
        base_depth = base.depth - base.y

        # Rule 18a
        if _is_character_box(atom):
            sup_shift = sub_shift = 0.0
        else:
            sup_shift = base_height - SIGMAS['sup_drop'] * sup_style.size
            sub_shift = base_depth + SIGMAS['sub_drop'] * sub_style.size

        min_sup_shift = (SIGMAS['sup1'] if style == MathStyle.DISPLAY else SIGMAS['sup2']) * m

        if sup is None:
            # Rule 18b
            sub_shift = max(sub_shift, SIGMAS['sub1'] * m, sub.height - 0.8 * x_height)
        elif sub is None:
            # Rule 18c, d
            sup_shift = max(sup_shift, min_sup_shift, sup.depth + 0.25 * x_height)
        else:
            sup_shift = max(sup_shift, min_sup_shift, sup.depth + 0.25 * x_height)
            sub_shift = max(sub_shift, SIGMAS['sub2'] * m)
            # Rule 18e
            if (sup_shift - sup.depth) - (sub.height - sub_shift) < 4 * rule_width:
                sub_shift = 4 * rule_width - (sup_shift - sup.depth) + sub.height
                psi = 0.8 * x_height - (sup_shift - sup.depth)
                if psi > 0:
                    sup_shift += psi
                    sub_shift -= psi

        script_space = SIGMAS['script_space'] * m
        column = [b for b in (sup, sub) if b is not None]
        column_width = max(b.width for b in column) + script_space

        children = [replace(base, x=0.0)]
        if sup is not None:
            children.append(replace(sup, x=base.width, y=sup_shift))
        if sub is not None:
            children.append(replace(sub, x=base.width, y=-sub_shift))
        return stack(children, base.width + column_width, classes + ('ML__supsub',), atom.identity)

    # -------------------------------------------------------------------------
    # Rule 13: operators with limits
    # -------------------------------------------------------------------------

    def layout_limits(self, atom: Atom, style: MathStyle, classes: Tuple[str, ...]) -> Box:
        m = style.size
        base = self.layout_operator(atom, style, classes)
        base_height = base.height + base.y
        base_depth = base.depth - base.y

        sup = self.layout_list(atom.superscript, style.sup(), ('ML__sup',)) \
            if atom.superscript is not None else None
        sub = self.layout_list(atom.subscript, style.sub(), ('ML__sub',)) \
            if atom.subscript is not None else None

        width = max(b.width for b in (base, sup, sub) if b is not None)
        children = [replace(base, x=(width - base.width) / 2)]
        extra_top = extra_bottom = 0.0
        if sup is not None:
            gap = max(SIGMAS['big_op_spacing1'] * m, SIGMAS['big_op_spacing3'] * m - sup.depth)
            children.append(replace(sup, x=(width - sup.width) / 2,
                                    y=base_height + gap + sup.depth))
            extra_top = SIGMAS['big_op_spacing5'] * m
        if sub is not None:
            gap = max(SIGMAS['big_op_spacing2'] * m, SIGMAS['big_op_spacing4'] * m - sub.height)
            children.append(replace(sub, x=(width - sub.width) / 2,
                                    y=-(base_depth + gap + sub.height)))
            extra_bottom = SIGMAS['big_op_spacing5'] * m

        box = stack(children, width, classes + ('ML__limits',), atom.identity)
        return replace(box, height=box.height + extra_top, depth=box.depth + extra_bottom)

    # -------------------------------------------------------------------------
    # Rule 15: fractions
    # -------------------------------------------------------------------------

    def layout_fraction(self, atom: Atom, style: MathStyle, classes: Tuple[str, ...]) -> Box:
        if atom.value == r'\dfrac':
            style = MathStyle.DISPLAY
        elif atom.value == r'\tfrac':
            style = MathStyle.TEXT
        m = style.size

        num = self.layout_list(atom.numerator, style.frac_num(), ('ML__numer',))
        den = self.layout_list(atom.denominator, style.frac_den(), ('ML__denom',))

        rule_width = SIGMAS['rule_thickness'] * m
        axis = SIGMAS['axis_height'] * m

        # Rule 15b
        if style == MathStyle.DISPLAY:
            num_shift = SIGMAS['num1'] * m
            den_shift = SIGMAS['denom1'] * m
            clearance = 3 * rule_width
        else:
            num_shift = SIGMAS['num2'] * m
            den_shift = SIGMAS['denom2'] * m
            clearance = rule_width

        # Rule 15d
        if (num_shift - num.depth) - (axis + rule_width / 2) < clearance:
            num_shift += clearance - ((num_shift - num.depth) - (axis + rule_width / 2))
        if (axis - rule_width / 2) - (den.height - den_shift) < clearance:
            den_shift += clearance - ((axis - rule_width / 2) - (den.height - den_shift))

        pad = SIGMAS['null_delimiter_space'] * m
        inner_width = max(num.width, den.width)
        width = inner_width + 2 * pad
        children = [
            replace(num, x=pad + (inner_width - num.width) / 2, y=num_shift),
            replace(rule(inner_width, rule_width, axis - rule_width / 2), x=pad),
            replace(den, x=pad + (inner_width - den.width) / 2, y=-den_shift),
        ]
        return stack(children, width, classes + ('ML__mfrac',), atom.identity)

    # -------------------------------------------------------------------------
    # Rule 11: radicals
    # -------------------------------------------------------------------------

    def layout_radical(self, atom: Atom, style: MathStyle, classes: Tuple[str, ...]) -> Box:
        m = style.size
        inner = self.layout_list(atom.radicand, style, ('ML__radicand',))
        rule_width = SIGMAS['rule_thickness'] * m
        phi = SIGMAS['x_height'] * m if style == MathStyle.DISPLAY else rule_width
        line_clearance = rule_width + phi / 4

        top = inner.height + line_clearance
        surd = Box(width=0.833 * m, height=top + rule_width, depth=inner.depth,
                   classes=('ML__sqrt-sign',), text='√')

        children = []
        x = 0.0
        if atom.index:
            index = self.layout_list(atom.index, MathStyle.SCRIPTSCRIPT, ('ML__index',))
            # Raised above the notch of the surd
            raise_by = 0.6 * (surd.height - surd.depth)
            children.append(replace(index, x=0.0, y=raise_by))
            x = max(0.0, index.width - 0.5 * surd.width)
        children.append(replace(surd, x=x))
        x += surd.width
        children.append(replace(inner, x=x))
        children.append(replace(rule(inner.width, rule_width, top), x=x))
        return stack(children, x + inner.width, classes + ('ML__sqrt',), atom.identity)

    # -------------------------------------------------------------------------
    # Rule 12: accents
    # -------------------------------------------------------------------------

    def layout_accent(self, atom: Atom, style: MathStyle, classes: Tuple[str, ...]) -> Box:
        m = style.size
        body = self.layout_list(atom.children, style)
        gap = 0.05 * m
        bottom = max(body.height, SIGMAS['x_height'] * m) + gap

        if atom.value == r'\overline':
            thickness = SIGMAS['rule_thickness'] * m
            mark = rule(body.width, thickness, bottom)
        else:
            text = glyph_for(atom.value)
            if atom.value in WIDE_ACCENTS:
                w = body.width
            else:
                w = min(char_metrics(text)[0], 0.5) * m
            mark = Box(width=w, height=0.25 * m, y=bottom, classes=('ML__accent-mark',), text=text)

        width = max(body.width, mark.width)
        children = [replace(body, x=(width - body.width) / 2),
                    replace(mark, x=(width - mark.width) / 2)]
        return stack(children, width, classes, atom.identity)

    # -------------------------------------------------------------------------
    # Delimiters and arrays
    # -------------------------------------------------------------------------

    def delimiter(self, value: Optional[str], inner: Box, style: MathStyle) -> Box:
        m = style.size
        if not value or value == '.':
            return Box(width=SIGMAS['null_delimiter_space'] * m, classes=('ML__nulldelimiter',))
        axis = SIGMAS['axis_height'] * m
        # Symmetric around the axis, at least the normal size
        half = max(inner.height - axis, inner.depth + axis, 0.5 * m)
        text = glyph_for(value)
        width = char_metrics(text)[0] * m
        if half > 0.5 * m:
            width *= 1.0 + 0.2 * (half / (0.5 * m) - 1.0)
        return Box(width=width, height=axis + half, depth=half - axis,
                   classes=('ML__delim',), text=text)

    def with_delimiters(self, inner: Box, left: Optional[str], right: Optional[str],
                        style: MathStyle, classes: Tuple[str, ...], atom_id: int) -> Box:
        return hbox([self.delimiter(left, inner, style), inner,
                     self.delimiter(right, inner, style)], classes, atom_id)

    def layout_array(self, atom: Atom, style: MathStyle, classes: Tuple[str, ...]) -> Box:
        m = style.size
        rows = split_array(atom.children)
        cell_boxes = [[self.layout_list(cell, style, ('ML__cell',)) for cell in row] for row in rows]
        n_cols = max(len(row) for row in cell_boxes)

        col_widths = [0.0] * n_cols
        for row in cell_boxes:
            for c, cell in enumerate(row):
                col_widths[c] = max(col_widths[c], cell.width)
        row_heights = [max([0.7 * m] + [cell.height for cell in row]) for row in cell_boxes]
        row_depths = [max([0.3 * m] + [cell.depth for cell in row]) for row in cell_boxes]

        col_sep = SIGMAS['array_col_sep'] * m
        jot = SIGMAS['jot'] * m
        total = sum(row_heights) + sum(row_depths) + jot * (len(rows) - 1)
        axis = SIGMAS['axis_height'] * m
        top = axis + total / 2

        aligns = column_alignments(atom.value, n_cols)
        children = []
        y = top
        for r, row in enumerate(cell_boxes):
            baseline = y - row_heights[r]
            x = col_sep
            for c in range(n_cols):
                if c < len(row):
                    cell = row[c]
                    slack = col_widths[c] - cell.width
                    offset = 0.0 if aligns[c] == 'l' else slack if aligns[c] == 'r' else slack / 2
                    children.append(replace(cell, x=x + offset, y=baseline))
                x += col_widths[c] + 2 * col_sep
            y = baseline - row_depths[r] - jot
        width = sum(col_widths) + 2 * col_sep * n_cols
        grid = stack(children, width, ('ML__array',))

        env = ENVIRONMENTS.get(atom.value)
        if env is not None and (env.left or env.right):
            return self.with_delimiters(grid, env.left, env.right, style, classes, atom.identity)
        return replace(grid, classes=classes + ('ML__array',), atom_id=atom.identity)


def _is_character_box(atom: Atom) -> bool:
    if atom.kind == AtomKind.ORD and atom.value.startswith("\\"):
        return True
    return atom.kind in CHARACTER_KINDS and len(atom.value) <= 1


def split_array(children: List[Atom]) -> List[List[List[Atom]]]:
    """Rows of cells of an array body split at & and \\\\."""
    rows: List[List[List[Atom]]] = [[[]]]
    for child in children:
        if child.kind == AtomKind.ALIGN:
            if child.value == '&':
                rows[-1].append([])
            else:
                rows.append([[]])
        else:
            rows[-1][-1].append(child)
    return rows


def column_alignments(environment: str, n_cols: int) -> List[str]:
    if environment == 'cases':
        return ['l'] * n_cols
    if environment == 'aligned':
        return ['r' if c % 2 == 0 else 'l' for c in range(n_cols)]
    return ['c'] * n_cols


# =============================================================================
# Entry Point
# =============================================================================

def layout(tree: Union[Atom, List[Atom]], style: Union[str, MathStyle] = MathStyle.DISPLAY) -> Box:
    """
    Lay out an atom tree.

    Args:
        tree: Root atom or atom forest
        style: 'display', 'text', 'script', 'scriptscript' or a MathStyle

    Returns:
        Root Box (class ML__base)
    """
    style = MathStyle.parse(style)
    engine = LayoutEngine(style)
    if isinstance(tree, Atom):
        atoms = tree.children if tree.kind == AtomKind.ROOT else [tree]
        caret_first = tree.kind == AtomKind.ROOT and tree.has_caret
    else:
        atoms, caret_first = tree, False
    base = engine.layout_list(atoms, style, ('ML__base',))
    if caret_first:
        base = hbox((caret_box(style),) + base.children, ('ML__base',))
    return base
