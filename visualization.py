import io
import logging

import graphviz
import matplotlib.pyplot as plt
import networkx as nx

from grammar import is_nonterminal

logger = logging.getLogger(__name__)

# Characters that break a mermaid stateDiagram label
MERMAID_RESERVED = set('"#:;{}|%')


def escape_mermaid(text):
    return ''.join(f"#{ord(ch)};" if ch in MERMAID_RESERVED else ch for ch in text)


def generate_mermaid_diagram(states, transitions):
    """Mermaid ``stateDiagram-v2`` source for the LR(0) automaton.

    ``states`` and ``transitions`` use the shapes produced by
    ``SLRParser.to_dict()``.
    """
    lines = ["stateDiagram-v2", ""]
    for index, state in enumerate(states):
        content = "\n\n".join(escape_mermaid(item) for item in state)
        lines.append(f'  state "State {index}\n\n{content}" as S{index}')
    for transition in transitions:
        lines.append(f"  S{transition['from']} --> S{transition['to']}: "
                     f"{escape_mermaid(transition['symbol'])}")
    return "\n".join(lines) + "\n"


def generate_dfa_graph(states, transitions):
    dot = graphviz.Digraph(comment='LR(0) automaton for SLR Parser')
    dot.attr(rankdir='LR')

    for i, state in enumerate(states):
        label = f"State {i}\\n"
        label += "─" * 20 + "\\n"
        for item in state:
            label += f"{item}\\l"
        dot.node(str(i), label, shape='rectangle')

    for transition in transitions:
        symbol = transition['symbol']
        if is_nonterminal(symbol):
            dot.edge(str(transition['from']), str(transition['to']),
                     label=f"GOTO {symbol}", color='blue')
        else:
            dot.edge(str(transition['from']), str(transition['to']),
                     label=f"Shift {symbol}", color='green')
    return dot


def build_state_graph(states, transitions):
    """networkx DiGraph of the automaton; parallel transitions share one edge."""
    G = nx.DiGraph()
    for i, state in enumerate(states):
        G.add_node(i, label=f"State {i}\n" + "\n".join(state))
    for transition in transitions:
        source, target, symbol = transition['from'], transition['to'], transition['symbol']
        color = 'blue' if is_nonterminal(symbol) else 'green'
        if G.has_edge(source, target):
            edge = G.edges[source, target]
            edge['label'] += f", {symbol}"
            if edge['color'] != color:
                edge['color'] = 'gray'
        else:
            G.add_edge(source, target, label=symbol, color=color)
    return G


def render_dfa_png(states, transitions):
    G = build_state_graph(states, transitions)
    logger.debug("Rendering automaton with %d nodes and %d edges",
                 G.number_of_nodes(), G.number_of_edges())

    fig = plt.figure(figsize=(24, 20))
    pos = nx.spring_layout(G, k=3.0, iterations=50, seed=42)

    nx.draw_networkx_nodes(G, pos,
                           node_size=10000,
                           node_color='lightblue',
                           alpha=0.9,
                           node_shape='s',
                           linewidths=3,
                           edgecolors='darkblue')

    edge_colors = [color for _, _, color in G.edges(data='color')]
    nx.draw_networkx_edges(G, pos,
                           arrowsize=25,
                           width=2.5,
                           edge_color=edge_colors,
                           arrowstyle='->',
                           connectionstyle='arc3,rad=0.2')

    nx.draw_networkx_edge_labels(G, pos,
                                 edge_labels=nx.get_edge_attributes(G, 'label'),
                                 font_size=10,
                                 font_weight='bold',
                                 bbox=dict(facecolor='white', alpha=0.9, pad=0.5))

    nx.draw_networkx_labels(G, pos,
                            labels=nx.get_node_attributes(G, 'label'),
                            font_size=9,
                            font_weight='bold',
                            bbox=dict(facecolor='white', alpha=0.9, pad=0.5))

    plt.title("LR(0) Automaton for SLR Parser\n"
              "Blue edges: GOTO transitions | Green edges: Shift actions",
              fontsize=20, fontweight='bold', pad=20)
    plt.margins(0.2)
    plt.axis('off')

    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=100, bbox_inches='tight',
                facecolor='white', edgecolor='none', pad_inches=0.8)
    buf.seek(0)
    plt.close(fig)
    return buf
