import logging
import re
from collections import namedtuple
from enum import Enum

from settings import ALTERNATIVE, ARROW, AUGMENT_MARK, END_MARKER, EPSILON

logger = logging.getLogger(__name__)

NONTERMINAL_PATTERN = re.compile(r'[A-Z]')


class GrammarError(ValueError):
    pass


class SymbolKind(Enum):
    TERMINAL = 'terminal'
    NONTERMINAL = 'nonterminal'


Rule = namedtuple('Rule', ['head', 'body'])


def classify(symbol):
    if NONTERMINAL_PATTERN.fullmatch(symbol):
        return SymbolKind.NONTERMINAL
    return SymbolKind.TERMINAL


def is_nonterminal(symbol):
    return classify(symbol) is SymbolKind.NONTERMINAL


def is_terminal(symbol):
    return classify(symbol) is SymbolKind.TERMINAL


def normalize_body(body, context):
    """A lone ``ε`` body is an empty production; ``ε`` may not appear otherwise."""
    body = tuple(body)
    if body == (EPSILON,):
        return ()
    if EPSILON in body:
        raise GrammarError(f"'{EPSILON}' must stand alone in an alternative: {context}")
    return body


def parse_grammar(grammar_input):
    """Parse ``Head -> alt | alt`` lines into an ordered list of rules.

    An empty alternative, or one consisting of a lone ``ε``, is an
    ε-production and yields an empty body.
    """
    rules = []
    for line in grammar_input.split('\n'):
        line = line.strip()
        if not line:
            continue

        parts = [part.strip() for part in line.split(ARROW)]
        if len(parts) != 2:
            raise GrammarError(f"Invalid rule format: {line}")

        head, productions = parts
        if not head:
            raise GrammarError(f"Invalid rule (empty left side): {line}")
        if not is_nonterminal(head):
            raise GrammarError(
                f"Left side should be a single uppercase letter: {line}")

        for production in productions.split(ALTERNATIVE):
            rules.append(Rule(head, normalize_body(production.split(), line)))
    return rules


def find_unresolved_symbols(rules):
    """Nonterminals used in some body but never defined, in first-use order."""
    heads = {head for head, _ in rules}
    unresolved = []
    for _, body in rules:
        for symbol in body:
            if is_nonterminal(symbol) and symbol not in heads and symbol not in unresolved:
                unresolved.append(symbol)
    return unresolved


def augment_grammar(rules):
    """Return a new rule list with ``S' -> S`` prepended at index 0."""
    rules = [Rule(head, tuple(body)) for head, body in rules]
    if not rules:
        raise GrammarError("Cannot augment an empty grammar")

    start = rules[0].head
    symbols = {rule.head for rule in rules}
    for rule in rules:
        symbols.update(rule.body)

    augmented_start = start + AUGMENT_MARK
    while augmented_start in symbols:
        augmented_start += AUGMENT_MARK
    return [Rule(augmented_start, (start,))] + rules


class Grammar:
    """An augmented grammar with every symbol classified once at load time."""

    def __init__(self, rules):
        self.rules = [Rule(head, normalize_body(body, f"{head} -> {' '.join(body)}"))
                      for head, body in rules]
        if not self.rules:
            raise GrammarError("Grammar has no rules")
        for rule in self.rules:
            if not is_nonterminal(rule.head):
                raise GrammarError(
                    f"Rule head should be a single uppercase letter: {rule.head!r}")

        self.start_symbol = self.rules[0].head
        self.augmented_rules = augment_grammar(self.rules)
        self.augmented_start = self.augmented_rules[0].head

        self.kinds = {self.augmented_start: SymbolKind.NONTERMINAL}
        self.heads = []
        self.terminals = []
        self.non_terminals = []
        for rule in self.rules:
            if rule.head not in self.heads:
                self.heads.append(rule.head)
            for symbol in (rule.head,) + rule.body:
                if symbol in self.kinds:
                    continue
                kind = self.kinds[symbol] = classify(symbol)
                if kind is SymbolKind.NONTERMINAL:
                    self.non_terminals.append(symbol)
                else:
                    self.terminals.append(symbol)

        # Duplicate rules share the last index they appear at
        self.rule_index = {}
        for index, rule in enumerate(self.augmented_rules):
            self.rule_index[rule] = index
        self.rules_by_head = {}
        for rule, index in self.rule_index.items():
            self.rules_by_head.setdefault(rule.head, []).append(index)
        for indices in self.rules_by_head.values():
            indices.sort()

        self.unresolved_symbols = find_unresolved_symbols(self.rules)
        for symbol in self.unresolved_symbols:
            logger.warning("Nonterminal %s is used but has no defining rule", symbol)

    def is_terminal(self, symbol):
        return self.kinds.get(symbol, classify(symbol)) is SymbolKind.TERMINAL

    def is_nonterminal(self, symbol):
        return self.kinds.get(symbol, classify(symbol)) is SymbolKind.NONTERMINAL

    @property
    def action_columns(self):
        return [t for t in self.terminals if t != END_MARKER] + [END_MARKER]

    @property
    def goto_columns(self):
        return list(self.heads)

    def __len__(self):
        return len(self.augmented_rules)

    def __getitem__(self, index):
        return self.augmented_rules[index]

    def format_rule(self, index):
        rule = self.augmented_rules[index]
        return f"{rule.head} {ARROW} {' '.join(rule.body) or EPSILON}"
