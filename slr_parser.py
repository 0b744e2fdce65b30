import logging
from collections import namedtuple
from dataclasses import dataclass

import pandas as pd

from grammar import Grammar
from settings import ARROW, DOT, END_MARKER, EPSILON

logger = logging.getLogger(__name__)

Item = namedtuple('Item', ['rule', 'dot'])
Transition = namedtuple('Transition', ['source', 'target', 'symbol'])
Conflict = namedtuple('Conflict', ['state', 'symbol', 'previous', 'chosen'])


@dataclass(frozen=True)
class Shift:
    state: int

    def __str__(self):
        return f"S{self.state}"


@dataclass(frozen=True)
class Reduce:
    rule: int

    def __str__(self):
        return f"R{self.rule}"


@dataclass(frozen=True)
class Accept:
    def __str__(self):
        return "Accept"


class SLRParser:
    """Canonical LR(0) collection and SLR(1) tables for a list of (head, body) rules.

    Everything is built in the constructor; the instance is read-only
    afterwards.
    """

    def __init__(self, grammar_rules):
        self.grammar = Grammar(grammar_rules)
        self.unresolved_symbols = self.grammar.unresolved_symbols

        self.first = self.compute_first()
        self.follow = self.compute_follow()

        self.states = []
        self.transitions = []
        self.action = {}
        self.goto_table = {}
        self.conflicts = []
        self.build_slr_table()

    def compute_first(self):
        rules = self.grammar.rules
        first = {rule.head: set() for rule in rules}
        changed = True

        while changed:
            changed = False
            for head, body in rules:
                old_size = len(first[head])
                if not body:
                    first[head].add(EPSILON)
                else:
                    nullable = True
                    for symbol in body:
                        if self.grammar.is_terminal(symbol):
                            first[head].add(symbol)
                            nullable = False
                            break
                        # Undefined nonterminals contribute nothing and do not stop the walk,
                        # but a body holding one is never nullable
                        symbol_first = first.get(symbol)
                        if symbol_first is None:
                            nullable = False
                            continue
                        first[head].update(symbol_first - {EPSILON})
                        if EPSILON not in symbol_first:
                            nullable = False
                            break
                    if nullable:
                        first[head].add(EPSILON)
                if len(first[head]) > old_size:
                    changed = True
        return first

    def compute_follow(self):
        rules = self.grammar.rules
        follow = {nt: set() for nt in self.grammar.non_terminals}
        follow[self.grammar.start_symbol].add(END_MARKER)
        changed = True

        while changed:
            changed = False
            for head, body in rules:
                for i, symbol in enumerate(body):
                    if not self.grammar.is_nonterminal(symbol):
                        continue
                    old_size = len(follow[symbol])
                    for next_symbol in body[i + 1:]:
                        if self.grammar.is_terminal(next_symbol):
                            follow[symbol].add(next_symbol)
                            break
                        next_first = self.first.get(next_symbol, set())
                        follow[symbol].update(next_first - {EPSILON})
                        if EPSILON not in next_first:
                            break
                    else:
                        follow[symbol].update(follow[head])
                    if len(follow[symbol]) > old_size:
                        changed = True
        return follow

    def closure(self, items):
        closure_set = set(items)
        worklist = list(closure_set)
        while worklist:
            rule, dot = worklist.pop()
            body = self.grammar[rule].body
            if dot < len(body) and self.grammar.is_nonterminal(body[dot]):
                for index in self.grammar.rules_by_head.get(body[dot], []):
                    new_item = Item(index, 0)
                    if new_item not in closure_set:
                        closure_set.add(new_item)
                        worklist.append(new_item)
        return tuple(sorted(closure_set))

    def goto(self, state, symbol):
        items = set()
        for rule, dot in state:
            body = self.grammar[rule].body
            if dot < len(body) and body[dot] == symbol:
                items.add(Item(rule, dot + 1))
        if not items:
            return ()
        return self.closure(items)

    def next_symbols(self, state):
        symbols = []
        for rule, dot in state:
            body = self.grammar[rule].body
            if dot < len(body) and body[dot] not in symbols:
                symbols.append(body[dot])
        return symbols

    def set_action(self, state_num, symbol, action):
        previous = self.action.get((state_num, symbol))
        if previous is not None and previous != action:
            conflict = Conflict(state_num, symbol, previous, action)
            logger.warning("Conflict in state %d on %r: %s overwritten by %s",
                           state_num, symbol, previous, action)
            self.conflicts.append(conflict)
        self.action[(state_num, symbol)] = action

    def build_slr_table(self):
        initial_items = self.closure({Item(0, 0)})
        self.states.append(initial_items)
        state_map = {initial_items: 0}

        i = 0
        while i < len(self.states):
            state = self.states[i]

            for symbol in self.next_symbols(state):
                next_state = self.goto(state, symbol)
                if not next_state:
                    continue
                if next_state not in state_map:
                    state_map[next_state] = len(self.states)
                    self.states.append(next_state)
                found = state_map[next_state]
                self.transitions.append(Transition(i, found, symbol))

                if self.grammar.is_nonterminal(symbol):
                    self.goto_table[(i, symbol)] = found
                else:
                    self.set_action(i, symbol, Shift(found))

            for rule, dot in state:
                head, body = self.grammar[rule]
                if dot != len(body):
                    continue
                if rule == 0:
                    self.set_action(i, END_MARKER, Accept())
                    continue
                for terminal in sorted(self.follow.get(head, ())):
                    self.set_action(i, terminal, Reduce(rule))
            i += 1

        logger.debug("Built %d states, %d transitions, %d conflicts",
                     len(self.states), len(self.transitions), len(self.conflicts))

    def format_item(self, item):
        head, body = self.grammar[item.rule]
        symbols = list(body[:item.dot]) + [DOT] + list(body[item.dot:])
        return f"{head} {ARROW} {' '.join(symbols)}"

    def state_descriptions(self):
        return [[self.format_item(item) for item in state] for state in self.states]

    def action_rows(self):
        rows = []
        for state in range(len(self.states)):
            row = {'state': str(state)}
            for terminal in self.grammar.action_columns:
                action = self.action.get((state, terminal))
                row[terminal] = str(action) if action is not None else ''
            rows.append(row)
        return rows

    def goto_rows(self):
        rows = []
        for state in range(len(self.states)):
            row = {'state': str(state)}
            for non_terminal in self.grammar.goto_columns:
                target = self.goto_table.get((state, non_terminal))
                row[non_terminal] = f"I{target}" if target is not None else ''
            rows.append(row)
        return rows

    def to_dict(self):
        return {
            'states': self.state_descriptions(),
            'transitions': [
                {'from': t.source, 'to': t.target, 'symbol': t.symbol}
                for t in self.transitions
            ],
            'actionTable': self.action_rows(),
            'gotoTable': self.goto_rows(),
        }

    def get_tables(self):
        df_action = pd.DataFrame(self.action_rows(),
                                 columns=['state'] + self.grammar.action_columns)
        df_goto = pd.DataFrame(self.goto_rows(),
                               columns=['state'] + self.grammar.goto_columns)
        return df_action.set_index('state'), df_goto.set_index('state')
