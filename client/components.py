# client/components.py
import streamlit as st
import pandas as pd

# Columns worth showing per kind; search items carry more than this.
RESULT_COLUMNS = {
    "customer": ["id", "text", "email"],
    "subscription": ["id", "plan", "status", "customer_display"],
    "product": ["id", "name", "price_amount", "price_currency", "price_interval", "active"],
}

def show_results(items, kind: str, caption: str | None = None):
    """Search items as a dataframe, trimmed to the kind's display columns."""
    if caption:
        st.caption(caption)
    if not items:
        st.write("No results.")
        return
    df = pd.DataFrame(items)
    cols = [c for c in RESULT_COLUMNS.get(kind, []) if c in df.columns]
    st.dataframe(df[cols] if cols else df, hide_index=True)

def show_record(record, caption: str | None = None):
    """A stored value: the label up top, the full record folded away."""
    if caption:
        st.caption(caption)
    if not record:
        st.write("(empty)")
        return
    st.markdown(f"**{record.get('label') or record.get('id')}**")
    with st.expander("Stored record"):
        st.json(record)
