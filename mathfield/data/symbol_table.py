"""
Symbol and Command Table

Static registry of the LaTeX commands the editor understands. For each command:
- The atom kind it produces ('mord', 'mbin', 'genfrac', 'surd', ...)
- Its argument arity (0-2) and whether it takes an optional [index]
- The glyph used by the layout engine
- A short note and sample LaTeX for suggestion previews
- A spoken form for accessible text
- A frequency used to rank autocomplete suggestions

The table is built once at import time and is read-only afterwards.

Usage:
    spec = lookup(r"\\frac")
    candidates = suggest(r"\\al")
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class CommandSpec:
    """Definition of a single LaTeX command."""
    name: str                 # Including the backslash, e.g. "\\alpha"
    kind: str                 # Atom kind value, e.g. "mord"
    arity: int = 0            # Number of required {arguments}
    optional_arg: bool = False  # Accepts a leading [optional] argument
    glyph: str = ""           # Rendered character(s)
    note: str = ""
    speak: str = ""
    frequency: int = 20


@dataclass(frozen=True)
class Suggestion:
    """An autocomplete candidate."""
    match: str
    note: str = ""
    sample: str = ""
    frequency: int = 0


@dataclass(frozen=True)
class EnvironmentSpec:
    """A \\begin{...} environment laid out as a grid."""
    name: str
    left: Optional[str] = None
    right: Optional[str] = None
    note: str = ""


# =============================================================================
# Table Definition
# =============================================================================

def build_command_table() -> Dict[str, CommandSpec]:
    """Build the complete command table."""

    table: Dict[str, CommandSpec] = {}

    def add(entries, kind, arity=0, frequency=20, optional_arg=False, note=""):
        for entry in entries:
            name, glyph = entry[0], entry[1]
            speak = entry[2] if len(entry) > 2 else name[1:]
            table[name] = CommandSpec(
                name=name, kind=kind, arity=arity, optional_arg=optional_arg,
                glyph=glyph, note=note, speak=speak, frequency=frequency,
            )

    # =========================================================================
    # Greek Letters
    # =========================================================================
    greek_lower = [
        (r"\alpha", "α"), (r"\beta", "β"), (r"\gamma", "γ"), (r"\delta", "δ"),
        (r"\epsilon", "ϵ"), (r"\varepsilon", "ε", "epsilon"), (r"\zeta", "ζ"),
        (r"\eta", "η"), (r"\theta", "θ"), (r"\vartheta", "ϑ", "theta"),
        (r"\iota", "ι"), (r"\kappa", "κ"), (r"\lambda", "λ"), (r"\mu", "μ"),
        (r"\nu", "ν"), (r"\xi", "ξ"), (r"\omicron", "ο"), (r"\pi", "π"),
        (r"\varpi", "ϖ", "pi"), (r"\rho", "ρ"), (r"\varrho", "ϱ", "rho"),
        (r"\sigma", "σ"), (r"\varsigma", "ς", "sigma"), (r"\tau", "τ"),
        (r"\upsilon", "υ"), (r"\phi", "ϕ"), (r"\varphi", "φ", "phi"),
        (r"\chi", "χ"), (r"\psi", "ψ"), (r"\omega", "ω"),
    ]
    add(greek_lower, "mord", frequency=50, note="greek letter")

    greek_upper = [
        (r"\Gamma", "Γ", "capital gamma"), (r"\Delta", "Δ", "capital delta"),
        (r"\Theta", "Θ", "capital theta"), (r"\Lambda", "Λ", "capital lambda"),
        (r"\Xi", "Ξ", "capital xi"), (r"\Pi", "Π", "capital pi"),
        (r"\Sigma", "Σ", "capital sigma"), (r"\Upsilon", "Υ", "capital upsilon"),
        (r"\Phi", "Φ", "capital phi"), (r"\Psi", "Ψ", "capital psi"),
        (r"\Omega", "Ω", "capital omega"),
    ]
    add(greek_upper, "mord", frequency=45, note="greek letter")

    # =========================================================================
    # Binary Operators
    # =========================================================================
    operators = [
        (r"\times", "×", "times"), (r"\cdot", "⋅", "times"),
        (r"\div", "÷", "divided by"), (r"\pm", "±", "plus or minus"),
        (r"\mp", "∓", "minus or plus"), (r"\ast", "∗", "asterisk"),
        (r"\star", "⋆"), (r"\circ", "∘", "composed with"), (r"\bullet", "∙"),
        (r"\oplus", "⊕", "direct sum"), (r"\otimes", "⊗", "tensor product"),
        (r"\odot", "⊙"), (r"\wedge", "∧", "and"), (r"\vee", "∨", "or"),
        (r"\cap", "∩", "intersection"), (r"\cup", "∪", "union"),
        (r"\setminus", "∖", "set minus"), (r"\sqcup", "⊔"),
    ]
    add(operators, "mbin", frequency=40, note="binary operator")

    # =========================================================================
    # Relations and Arrows
    # =========================================================================
    relations = [
        (r"\le", "≤", "less than or equal to"), (r"\leq", "≤", "less than or equal to"),
        (r"\ge", "≥", "greater than or equal to"), (r"\geq", "≥", "greater than or equal to"),
        (r"\ne", "≠", "not equal to"), (r"\neq", "≠", "not equal to"),
        (r"\ll", "≪", "much less than"), (r"\gg", "≫", "much greater than"),
        (r"\approx", "≈", "approximately equal to"), (r"\equiv", "≡", "is equivalent to"),
        (r"\sim", "∼", "is similar to"), (r"\simeq", "≃"), (r"\cong", "≅", "is congruent to"),
        (r"\propto", "∝", "is proportional to"), (r"\parallel", "∥", "is parallel to"),
        (r"\perp", "⊥", "is perpendicular to"), (r"\subset", "⊂", "is a subset of"),
        (r"\supset", "⊃", "is a superset of"), (r"\subseteq", "⊆"), (r"\supseteq", "⊇"),
        (r"\in", "∈", "is an element of"), (r"\ni", "∋"), (r"\notin", "∉", "is not an element of"),
        (r"\vdash", "⊢"), (r"\models", "⊨"), (r"\prec", "≺"), (r"\succ", "≻"),
    ]
    add(relations, "mrel", frequency=40, note="relation")

    arrows = [
        (r"\to", "→", "to"), (r"\rightarrow", "→", "right arrow"),
        (r"\leftarrow", "←", "left arrow"), (r"\Rightarrow", "⇒", "implies"),
        (r"\Leftarrow", "⇐", "is implied by"), (r"\Leftrightarrow", "⇔", "if and only if"),
        (r"\leftrightarrow", "↔"), (r"\mapsto", "↦", "maps to"),
        (r"\implies", "⟹", "implies"), (r"\iff", "⟺", "if and only if"),
        (r"\uparrow", "↑"), (r"\downarrow", "↓"),
    ]
    add(arrows, "mrel", frequency=35, note="arrow")

    # =========================================================================
    # Delimiters
    # =========================================================================
    add([(r"\langle", "⟨", "left angle bracket"), (r"\lfloor", "⌊", "floor of"),
         (r"\lceil", "⌈", "ceiling of"), (r"\{", "{", "open brace"),
         (r"\lbrace", "{", "open brace")], "mopen", frequency=30, note="opening delimiter")
    add([(r"\rangle", "⟩", "right angle bracket"), (r"\rfloor", "⌋", "end floor"),
         (r"\rceil", "⌉", "end ceiling"), (r"\}", "}", "close brace"),
         (r"\rbrace", "}", "close brace")], "mclose", frequency=30, note="closing delimiter")
    add([(r"\vert", "|", "vertical bar"), (r"\Vert", "‖", "double vertical bar"),
         (r"\|", "‖", "double vertical bar")], "mord", frequency=25)

    # =========================================================================
    # Large Operators and Functions
    # =========================================================================
    large_ops = [
        (r"\sum", "∑", "the sum"), (r"\prod", "∏", "the product"),
        (r"\coprod", "∐", "the coproduct"), (r"\int", "∫", "the integral"),
        (r"\iint", "∬", "the double integral"), (r"\iiint", "∭", "the triple integral"),
        (r"\oint", "∮", "the contour integral"), (r"\bigcup", "⋃", "the union"),
        (r"\bigcap", "⋂", "the intersection"),
    ]
    add(large_ops, "mop", frequency=60, note="large operator")

    functions = [
        (r"\sin", "sin", "sine"), (r"\cos", "cos", "cosine"), (r"\tan", "tan", "tangent"),
        (r"\cot", "cot", "cotangent"), (r"\sec", "sec", "secant"), (r"\csc", "csc", "cosecant"),
        (r"\arcsin", "arcsin", "arc sine"), (r"\arccos", "arccos", "arc cosine"),
        (r"\arctan", "arctan", "arc tangent"), (r"\sinh", "sinh", "hyperbolic sine"),
        (r"\cosh", "cosh", "hyperbolic cosine"), (r"\tanh", "tanh", "hyperbolic tangent"),
        (r"\log", "log", "log"), (r"\ln", "ln", "natural log"), (r"\lg", "lg", "log base 2"),
        (r"\exp", "exp", "exponential"), (r"\lim", "lim", "the limit"),
        (r"\limsup", "lim sup", "the limit superior"), (r"\liminf", "lim inf", "the limit inferior"),
        (r"\max", "max", "the maximum"), (r"\min", "min", "the minimum"),
        (r"\sup", "sup", "the supremum"), (r"\inf", "inf", "the infimum"),
        (r"\arg", "arg", "argument"), (r"\det", "det", "determinant"),
        (r"\dim", "dim", "dimension"), (r"\ker", "ker", "kernel"), (r"\deg", "deg", "degree"),
        (r"\gcd", "gcd", "greatest common divisor"), (r"\hom", "hom"), (r"\Pr", "Pr", "probability"),
    ]
    add(functions, "mop", frequency=55, note="function")

    # =========================================================================
    # Ordinary Symbols
    # =========================================================================
    symbols = [
        (r"\infty", "∞", "infinity"), (r"\partial", "∂", "partial"),
        (r"\nabla", "∇", "nabla"), (r"\emptyset", "∅", "the empty set"),
        (r"\varnothing", "∅", "the empty set"), (r"\forall", "∀", "for all"),
        (r"\exists", "∃", "there exists"), (r"\nexists", "∄", "there does not exist"),
        (r"\neg", "¬", "not"), (r"\angle", "∠", "angle"), (r"\triangle", "△", "triangle"),
        (r"\prime", "′", "prime"), (r"\ell", "ℓ", "ell"), (r"\hbar", "ℏ", "h bar"),
        (r"\aleph", "ℵ", "aleph"), (r"\Re", "ℜ", "real part"), (r"\Im", "ℑ", "imaginary part"),
        (r"\wp", "℘"), (r"\top", "⊤", "top"), (r"\bot", "⊥", "bottom"),
        (r"\ldots", "…", "dot dot dot"), (r"\cdots", "⋯", "dot dot dot"),
        (r"\vdots", "⋮", "vertical dots"), (r"\ddots", "⋱", "diagonal dots"),
        (r"\therefore", "∴", "therefore"), (r"\because", "∵", "because"),
        (r"\dagger", "†", "dagger"),
        (r"\#", "#", "hash"), (r"\$", "$", "dollar"), (r"\%", "%", "percent"),
        (r"\&", "&", "ampersand"), (r"\_", "_", "underscore"),
    ]
    add(symbols, "mord", frequency=40, note="symbol")

    # =========================================================================
    # Fractions, Roots
    # =========================================================================
    add([(r"\frac", "", "fraction"), (r"\dfrac", "", "fraction"),
         (r"\tfrac", "", "fraction")], "genfrac", arity=2, frequency=70, note="fraction")
    add([(r"\sqrt", "√", "square root")], "surd", arity=1, optional_arg=True,
        frequency=70, note="root")

    # =========================================================================
    # Accents
    # =========================================================================
    accents = [
        (r"\hat", "ˆ", "hat"), (r"\check", "ˇ", "check"), (r"\tilde", "˜", "tilde"),
        (r"\acute", "ˊ", "acute"), (r"\grave", "ˋ", "grave"), (r"\dot", "˙", "dot"),
        (r"\ddot", "¨", "double dot"), (r"\breve", "˘", "breve"), (r"\bar", "ˉ", "bar"),
        (r"\vec", "→", "vector"), (r"\widehat", "ˆ", "hat"), (r"\widetilde", "˜", "tilde"),
        (r"\overline", "", "overline"), (r"\overrightarrow", "→", "vector"),
    ]
    add(accents, "accent", arity=1, frequency=30, note="accent")

    # =========================================================================
    # Font Variants and Text
    # =========================================================================
    fonts = [
        (r"\mathbb", "", "blackboard"), (r"\mathcal", "", "calligraphic"),
        (r"\mathfrak", "", "fraktur"), (r"\mathscr", "", "script"),
        (r"\mathsf", "", "sans serif"), (r"\mathtt", "", "typewriter"),
        (r"\mathbf", "", "bold"), (r"\mathit", "", "italic"), (r"\mathrm", "", "roman"),
        (r"\boldsymbol", "", "bold"), (r"\text", "", "text"),
    ]
    add(fonts, "font", arity=1, frequency=30, note="font variant")

    # =========================================================================
    # Spacing
    # =========================================================================
    add([(r"\,", "", "thin space"), (r"\:", "", "medium space"),
         (r"\;", "", "thick space"), (r"\!", "", "negative thin space"),
         (r"\ ", "", "space"), (r"\quad", "", "space"), (r"\qquad", "", "space")],
        "spacing", frequency=10, note="spacing")

    # =========================================================================
    # Editor Specific
    # =========================================================================
    add([(r"\placeholder", "⬚", "placeholder")], "placeholder", arity=1,
        frequency=5, note="placeholder")

    # Most common commands first in suggestions
    boosts = {
        r"\frac": 100, r"\sqrt": 90, r"\sum": 85, r"\int": 85, r"\infty": 80,
        r"\pi": 80, r"\alpha": 75, r"\theta": 70, r"\times": 70, r"\lim": 70,
        r"\le": 65, r"\ge": 65, r"\ne": 65, r"\sin": 65, r"\cos": 65,
        r"\pm": 60, r"\cdot": 60, r"\log": 60, r"\ln": 60, r"\mathbb": 55,
        r"\vec": 50, r"\text": 50,
    }
    for name, frequency in boosts.items():
        spec = table[name]
        table[name] = CommandSpec(
            name=spec.name, kind=spec.kind, arity=spec.arity,
            optional_arg=spec.optional_arg, glyph=spec.glyph, note=spec.note,
            speak=spec.speak, frequency=frequency,
        )

    return table


# Single characters typed or parsed in math mode
CHAR_KINDS: Dict[str, str] = {
    '+': 'mbin', '-': 'mbin', '*': 'mbin',
    '=': 'mrel', '<': 'mrel', '>': 'mrel', ':': 'mrel',
    ',': 'mpunct', ';': 'mpunct',
    '(': 'mopen', '[': 'mopen',
    ')': 'mclose', ']': 'mclose',
}

CHAR_GLYPHS: Dict[str, str] = {
    '-': '−', '*': '∗', "'": '′',
}

CHAR_SPEECH: Dict[str, str] = {
    '+': 'plus', '-': 'minus', '*': 'times', '=': 'equals',
    '<': 'is less than', '>': 'is greater than', ':': 'colon',
    ',': 'comma', ';': 'semicolon', '(': 'open paren', ')': 'close paren',
    '[': 'open bracket', ']': 'close bracket', '!': 'factorial',
    '/': 'divided by', '|': 'vertical bar', "'": 'prime', '.': 'point',
}

ENVIRONMENTS: Dict[str, EnvironmentSpec] = {
    'matrix': EnvironmentSpec('matrix', note="matrix"),
    'pmatrix': EnvironmentSpec('pmatrix', '(', ')', "matrix in parentheses"),
    'bmatrix': EnvironmentSpec('bmatrix', '[', ']', "matrix in brackets"),
    'Bmatrix': EnvironmentSpec('Bmatrix', '{', '}', "matrix in braces"),
    'vmatrix': EnvironmentSpec('vmatrix', '|', '|', "determinant"),
    'Vmatrix': EnvironmentSpec('Vmatrix', '‖', '‖', "norm"),
    'cases': EnvironmentSpec('cases', '{', None, "cases"),
    'aligned': EnvironmentSpec('aligned', note="aligned equations"),
}

SAMPLES: Dict[str, str] = {
    r"\frac": r"\frac{x}{y}",
    r"\dfrac": r"\dfrac{x}{y}",
    r"\tfrac": r"\tfrac{x}{y}",
    r"\sqrt": r"\sqrt{x}",
    r"\mathbb": r"\mathbb{R}",
    r"\mathcal": r"\mathcal{C}",
    r"\mathfrak": r"\mathfrak{g}",
    r"\mathscr": r"\mathscr{L}",
    r"\vec": r"\vec{v}",
    r"\bar": r"\bar{x}",
    r"\hat": r"\hat{x}",
    r"\overline": r"\overline{z}",
    r"\sum": r"\sum_{i=1}^{n}",
    r"\int": r"\int_{a}^{b}",
    r"\lim": r"\lim_{x\to\infty}",
    r"\text": r"\text{text}",
}


COMMANDS: Dict[str, CommandSpec] = build_command_table()

# Reverse lookup: typed unicode glyph -> command
GLYPH_TO_COMMAND: Dict[str, str] = {}
for _spec in COMMANDS.values():
    if len(_spec.glyph) == 1 and _spec.arity == 0:
        GLYPH_TO_COMMAND.setdefault(_spec.glyph, _spec.name)
for _char in '{}#$%&_|':
    GLYPH_TO_COMMAND.pop(_char, None)


# =============================================================================
# Lookup Functions
# =============================================================================

def lookup(name: str) -> Optional[CommandSpec]:
    """Return the table entry for a command name (with backslash), or None."""
    return COMMANDS.get(name)


def char_kind(char: str) -> str:
    """Atom kind for a single character in math mode."""
    return CHAR_KINDS.get(char, 'mord')


def glyph_for(value: str) -> str:
    """Glyph displayed for a character or command."""
    spec = COMMANDS.get(value)
    if spec is not None:
        return spec.glyph or value
    return CHAR_GLYPHS.get(value, value)


def speech_for(value: str) -> str:
    """Spoken form of a character or command."""
    spec = COMMANDS.get(value)
    if spec is not None:
        return spec.speak
    return CHAR_SPEECH.get(value, value)


def get_note(name: str) -> str:
    spec = COMMANDS.get(name)
    if spec is not None:
        return spec.note
    env = ENVIRONMENTS.get(name)
    return env.note if env is not None else ""


def match_symbol(mode: str, name: str) -> Optional[CommandSpec]:
    """Commands usable as a standalone symbol (no arguments) in `mode`."""
    spec = COMMANDS.get(name)
    if spec is None or mode != 'math':
        return None
    if spec.arity == 0 and spec.kind in ('mord', 'mbin', 'mrel', 'mopen', 'mclose', 'spacing'):
        return spec
    return None


def match_function(mode: str, name: str) -> Optional[CommandSpec]:
    """Commands that take arguments or behave as operators in `mode`."""
    spec = COMMANDS.get(name)
    if spec is None or mode != 'math':
        return None
    if spec.arity > 0 or spec.kind == 'mop':
        return spec
    return None


def suggest(prefix: str, limit: Optional[int] = None) -> List[Suggestion]:
    """
    Autocomplete candidates for a command prefix.

    Ranking: an exact match first, then by frequency (most common first),
    then shorter names, then alphabetical.

    Args:
        prefix: Partial command, e.g. "\\al". Must start with a backslash.
        limit: Optional maximum number of candidates.

    Returns:
        Ordered list of Suggestion
    """
    if not prefix or not prefix.startswith('\\') or len(prefix) < 2:
        return []

    matches: List[Tuple[Tuple, CommandSpec]] = []
    for name, spec in COMMANDS.items():
        if spec.kind == 'placeholder':
            continue
        if name.startswith(prefix):
            key = (name != prefix, -spec.frequency, len(name), name)
            matches.append((key, spec))
    matches.sort(key=lambda item: item[0])

    result = [
        Suggestion(match=spec.name, note=spec.note,
                   sample=SAMPLES.get(spec.name, spec.name),
                   frequency=spec.frequency)
        for _, spec in matches
    ]
    if limit is not None:
        result = result[:limit]
    return result


def get_token_statistics() -> Dict[str, int]:
    """Number of commands per atom kind."""
    stats: Dict[str, int] = {}
    for spec in COMMANDS.values():
        stats[spec.kind] = stats.get(spec.kind, 0) + 1
    return stats
