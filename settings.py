import logging
import os

# Reserved symbols
END_MARKER = '$'
EPSILON = 'ε'

# Item and rule notation
DOT = '.'
ARROW = '->'
ALTERNATIVE = '|'
AUGMENT_MARK = "'"

LOG_LEVEL = os.environ.get('SLR_LOG_LEVEL', 'WARNING').upper()
LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s: %(message)s'

EXAMPLE_GRAMMARS = {
    "Simple Sequence": """S -> A B
A -> a
B -> b""",

    "Arithmetic Expression": """E -> E + T | T
T -> T * F | F
F -> ( E ) | a""",

    "Empty Production": """S -> A b
A -> a A |""",

    "Assignment (not SLR)": """S -> L = R | R
L -> * R | a
R -> L""",

    "Custom Grammar": ""  # Empty option for custom input
}


def configure_logging(level=None):
    """Install a basic root handler once, honouring SLR_LOG_LEVEL."""
    level = level or LOG_LEVEL
    logging.basicConfig(level=getattr(logging, level, logging.WARNING),
                        format=LOG_FORMAT)
