import unittest

import graphviz
import matplotlib
matplotlib.use('Agg')

from slr_parser import SLRParser
from visualization import (build_state_graph, escape_mermaid, generate_dfa_graph,
                           generate_mermaid_diagram, render_dfa_png)


class TestcaseMermaid(unittest.TestCase):
    def setUp(self):
        result = SLRParser([('S', ['A', 'B']), ('A', ['a']), ('B', ['b'])]).to_dict()
        self.diagram = generate_mermaid_diagram(result['states'], result['transitions'])

    def test_header_and_states(self):
        lines = self.diagram.split('\n')
        self.assertEqual(lines[0], 'stateDiagram-v2')
        self.assertIn('  state "State 0\n\nS\' -> . S\n\nS -> . A B\n\nA -> . a" as S0', self.diagram)
        self.assertIn('as S5', self.diagram)

    def test_transitions(self):
        self.assertIn('  S0 --> S3: a\n', self.diagram)
        self.assertIn('  S2 --> S4: B\n', self.diagram)

    def test_reserved_characters_are_escaped(self):
        self.assertEqual(escape_mermaid(':'), '#58;')
        self.assertEqual(escape_mermaid('a;b'), 'a#59;b')
        self.assertEqual(escape_mermaid('A -> . a'), 'A -> . a')
        parser = SLRParser([('S', [':', ';'])])
        result = parser.to_dict()
        diagram = generate_mermaid_diagram(result['states'], result['transitions'])
        self.assertIn(': #58;\n', diagram)
        self.assertNotIn(': :', diagram)


class TestcaseGraphs(unittest.TestCase):
    def setUp(self):
        self.result = SLRParser([('E', ['E', '+', 'a']), ('E', ['a'])]).to_dict()

    def test_graphviz_digraph(self):
        dot = generate_dfa_graph(self.result['states'], self.result['transitions'])
        self.assertIsInstance(dot, graphviz.Digraph)
        source = dot.source
        self.assertIn('GOTO E', source)
        self.assertIn('Shift +', source)
        self.assertIn('color=green', source)

    def test_state_graph(self):
        G = build_state_graph(self.result['states'], self.result['transitions'])
        self.assertEqual(G.number_of_nodes(), len(self.result['states']))
        self.assertEqual(G.number_of_edges(), len(self.result['transitions']))
        self.assertEqual(G.edges[0, 1]['color'], 'blue')
        self.assertTrue(G.nodes[0]['label'].startswith('State 0\n'))

    def test_parallel_transitions_share_an_edge(self):
        states = [['x'], ['y']]
        transitions = [{'from': 0, 'to': 1, 'symbol': 'a'},
                       {'from': 0, 'to': 1, 'symbol': 'B'}]
        G = build_state_graph(states, transitions)
        self.assertEqual(G.number_of_edges(), 1)
        self.assertEqual(G.edges[0, 1]['label'], 'a, B')
        self.assertEqual(G.edges[0, 1]['color'], 'gray')

    def test_png_rendering(self):
        buf = render_dfa_png(self.result['states'], self.result['transitions'])
        self.assertEqual(buf.read(8), b'\x89PNG\r\n\x1a\n')


if __name__ == '__main__':
    unittest.main()
