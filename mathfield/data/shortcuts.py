"""
Inline Shortcuts and Keystroke Tables

Read-only tables consulted by the shortcut matcher:
- INLINE_SHORTCUTS: typed trigger text -> LaTeX substitute ("pi" -> "\\pi")
- KEYSTROKES: per-mode mapping of key combinations to editor selectors

Selectors are the camelCase operation names of the command protocol, either
a bare name ("moveToNextChar") or a list with positional arguments
(["insert", "\\frac{#0}{#?}"]). They are converted to typed commands by the
model layer, which keeps this module free of model imports.
"""

from typing import Dict, List, Union

Selector = Union[str, List]


# =============================================================================
# Inline Shortcuts
# =============================================================================

INLINE_SHORTCUTS: Dict[str, str] = {
    # Greek letters
    'alpha': r'\alpha',
    'beta': r'\beta',
    'gamma': r'\gamma',
    'Gamma': r'\Gamma',
    'delta': r'\delta',
    'Delta': r'\Delta',
    'epsilon': r'\epsilon',
    'zeta': r'\zeta',
    'eta': r'\eta',
    'theta': r'\theta',
    'Theta': r'\Theta',
    'iota': r'\iota',
    'kappa': r'\kappa',
    'lambda': r'\lambda',
    'Lambda': r'\Lambda',
    'mu': r'\mu',
    'nu': r'\nu',
    'xi': r'\xi',
    'pi': r'\pi',
    'Pi': r'\Pi',
    'rho': r'\rho',
    'sigma': r'\sigma',
    'Sigma': r'\Sigma',
    'tau': r'\tau',
    'phi': r'\phi',
    'Phi': r'\Phi',
    'chi': r'\chi',
    'psi': r'\psi',
    'Psi': r'\Psi',
    'omega': r'\omega',
    'Omega': r'\Omega',

    # Functions
    'sin': r'\sin',
    'cos': r'\cos',
    'tan': r'\tan',
    'log': r'\log',
    'ln': r'\ln',
    'exp': r'\exp',
    'lim': r'\lim_{#?}',
    'sqrt': r'\sqrt{#?}',

    # Large operators
    'sum': r'\sum',
    'prod': r'\prod',
    'int': r'\int',
    'oo': r'\infty',
    'infty': r'\infty',

    # Relations and arrows
    '<=': r'\le',
    '>=': r'\ge',
    '!=': r'\ne',
    '<>': r'\ne',
    '~~': r'\approx',
    '->': r'\to',
    '<-': r'\leftarrow',
    '=>': r'\Rightarrow',
    '<=>': r'\Leftrightarrow',
    '|->': r'\mapsto',

    # Operators
    '+-': r'\pm',
    '-+': r'\mp',
    'xx': r'\times',
    '**': r'\cdot',
    '...': r'\ldots',

    # Sets
    'NN': r'\mathbb{N}',
    'ZZ': r'\mathbb{Z}',
    'QQ': r'\mathbb{Q}',
    'RR': r'\mathbb{R}',
    'CC': r'\mathbb{C}',
    'forall': r'\forall',
    'exists': r'\exists',
}


# =============================================================================
# Keystroke Tables
# =============================================================================

MATH_KEYSTROKES: Dict[str, Selector] = {
    'Left': 'moveToPreviousChar',
    'Right': 'moveToNextChar',
    'Up': 'moveUp',
    'Down': 'moveDown',
    'Shift-Left': 'extendToPreviousChar',
    'Shift-Right': 'extendToNextChar',
    'Alt-Left': 'moveToGroupStart',
    'Alt-Right': 'moveToGroupEnd',
    'Home': 'moveToMathFieldStart',
    'End': 'moveToMathFieldEnd',
    'Tab': 'moveToNextPlaceholder',
    'Shift-Tab': 'moveToPreviousPlaceholder',
    'Ctrl-Up': 'moveToSuperscript',
    'Ctrl-Down': 'moveToSubscript',
    'Backspace': 'deletePreviousChar',
    'Del': 'deleteNextChar',
    'Ctrl-Backspace': 'deleteToGroupStart',
    'Ctrl-Del': 'deleteToGroupEnd',
    'Ctrl-A': 'selectAll',
    'Ctrl-Space': 'selectGroup',
    'Ctrl-Z': 'undo',
    'Ctrl-Y': 'redo',
    'Ctrl-Shift-Z': 'redo',
    'Escape': 'enterCommandMode',
    '\\': 'enterCommandMode',
    'Alt-/': ['insert', r'\frac{#0}{#?}'],
    'Alt-V': ['insert', r'\sqrt{#0}'],
    'Alt-6': 'promoteToSuperscript',
    'Alt--': 'promoteToSubscript',
}

COMMAND_KEYSTROKES: Dict[str, Selector] = {
    'Left': 'moveToPreviousChar',
    'Right': 'moveToNextChar',
    'Up': 'previousSuggestion',
    'Down': 'nextSuggestion',
    'Backspace': 'deletePreviousChar',
    'Del': 'deleteNextChar',
    'Tab': 'complete',
    'Return': 'complete',
    'Enter': 'complete',
    'Escape': 'complete',
    'Space': 'complete',
    'Ctrl-Z': 'undo',
    'Ctrl-Y': 'redo',
}

KEYSTROKES: Dict[str, Dict[str, Selector]] = {
    'math': MATH_KEYSTROKES,
    'command': COMMAND_KEYSTROKES,
}


def normalize_keystroke(keystroke: str) -> str:
    """Canonical modifier order (Ctrl, Alt, Shift) and key aliases."""
    aliases = {'Esc': 'Escape', 'Delete': 'Del', 'ArrowLeft': 'Left',
               'ArrowRight': 'Right', 'ArrowUp': 'Up', 'ArrowDown': 'Down',
               ' ': 'Space'}
    if len(keystroke) <= 1 or keystroke in aliases:
        return aliases.get(keystroke, keystroke)
    # "Shift-Ctrl-Z" -> "Ctrl-Shift-Z"; the key itself may be "-"
    if keystroke.endswith('--'):
        head, key = keystroke[:-2], '-'
    elif '-' in keystroke:
        head, key = keystroke.rsplit('-', 1)
    else:
        return keystroke
    modifiers = set(head.split('-'))
    ordered = [m for m in ('Ctrl', 'Alt', 'Shift') if m in modifiers]
    key = aliases.get(key, key)
    return '-'.join(ordered + [key])


def shortcuts_for(latex: str) -> List[str]:
    """Inline shortcut triggers that produce exactly `latex`."""
    return sorted(trigger for trigger, sub in INLINE_SHORTCUTS.items() if sub == latex)
