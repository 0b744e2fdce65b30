import json

import pandas as pd
import streamlit as st

from grammar import GrammarError, parse_grammar
from settings import EXAMPLE_GRAMMARS, configure_logging
from slr_parser import SLRParser
from visualization import generate_dfa_graph, generate_mermaid_diagram, render_dfa_png


def show_sets(title, sets):
    st.write(f"### {title}")
    data = {symbol: ', '.join(sorted(values)) for symbol, values in sets.items()}
    st.dataframe(pd.DataFrame([data]))


def main():
    configure_logging()
    st.set_page_config(page_title="SLR Parser Visualization", layout="wide")
    st.title("SLR(1) Parser - Grammar Input")

    renderer = st.sidebar.selectbox(
        "State diagram renderer",
        ["Graphviz", "Mermaid source", "Static image"]
    )
    show_conflicts = st.sidebar.checkbox("Report table conflicts", value=True)

    st.header("Enter Grammar Rules")
    st.write("Enter each grammar rule in the format 'NonTerminal -> production | production'.")

    selected_grammar = st.selectbox("Select Grammar Example", list(EXAMPLE_GRAMMARS.keys()))
    grammar_input = st.text_area(
        "Grammar Rules (one per line):",
        value=EXAMPLE_GRAMMARS[selected_grammar],
        height=150,
        help="Use '|' to separate alternatives. Leave an alternative empty (or write ε) for an empty production."
    )

    st.info("""Grammar Writing Tips:
    1. Nonterminals are single uppercase letters (E, T, F, S, etc.)
    2. Every other symbol is a terminal (a, id, +, (, etc.)
    3. The first rule's left side is the start symbol
    4. Use spaces between symbols in productions
    """)

    if not grammar_input.strip():
        st.error("Please enter at least one valid grammar rule.")
        return

    try:
        parser = SLRParser(parse_grammar(grammar_input))
    except GrammarError as e:
        st.error(f"Error parsing grammar: {e}")
        return

    for symbol in parser.unresolved_symbols:
        st.warning(f"⚠ Nonterminal {symbol} is used but never defined")

    result = parser.to_dict()

    st.header("Augmented Grammar")
    st.table(pd.DataFrame(
        {"Production": [parser.grammar.format_rule(i) for i in range(len(parser.grammar))]}
    ))

    show_sets("FIRST Sets", parser.first)
    show_sets("FOLLOW Sets", parser.follow)

    st.header("State Diagram")
    if renderer == "Graphviz":
        st.graphviz_chart(generate_dfa_graph(result['states'], result['transitions']))
    elif renderer == "Mermaid source":
        st.code(generate_mermaid_diagram(result['states'], result['transitions']))
    else:
        st.image(render_dfa_png(result['states'], result['transitions']),
                 caption="LR(0) automaton")

    st.header("SLR Parsing Tables")
    action_table, goto_table = parser.get_tables()

    st.subheader("Action Table")
    st.dataframe(action_table)

    st.subheader("Goto Table")
    st.dataframe(goto_table)

    if show_conflicts and parser.conflicts:
        st.warning(f"{len(parser.conflicts)} conflicting entries were overwritten; "
                   "the grammar is not SLR(1).")
        st.dataframe(pd.DataFrame([
            {"State": c.state, "Symbol": c.symbol,
             "Overwritten": str(c.previous), "Kept": str(c.chosen)}
            for c in parser.conflicts
        ]))

    st.header("Canonical Collection of LR(0) Items")
    num_states = len(result['states'])
    tab_labels = [f"States {i}-{min(i+4, num_states-1)}" for i in range(0, num_states, 5)]
    tabs = st.tabs(tab_labels)
    for tab_idx, tab in enumerate(tabs):
        with tab:
            for i in range(tab_idx * 5, min((tab_idx + 1) * 5, num_states)):
                with st.expander(f"State {i}"):
                    st.table(pd.DataFrame({"Item": result['states'][i]}))

    st.download_button(
        "Download tables as JSON",
        data=json.dumps(result, ensure_ascii=False, indent=2),
        file_name="slr_tables.json",
        mime="application/json"
    )


if __name__ == "__main__":
    main()
