# client/pages/1_Pick.py
import requests
import streamlit as st
import api as API
from components import show_record, show_results

st.title("🔎 Pick a Stripe record")

# ------------------------
# Session state
# ------------------------
if "nonces" not in st.session_state:
    st.session_state.nonces = {}      # kind -> bootstrap data, loaded once per session
if "results" not in st.session_state:
    st.session_state.results = []

c1, c2, c3 = st.columns(3)
with c1:
    kind = st.selectbox("Kind", ["customer", "subscription", "product"], key="pick_kind")
with c2:
    object_id = st.text_input("Record ID", value="post-1", key="pick_object")
with c3:
    field_name = st.text_input("Field name", value=f"stripe_{kind}", key="pick_field")

def _bootstrap(kind: str):
    if kind not in st.session_state.nonces:
        st.session_state.nonces[kind] = API.nonce(kind)
    return st.session_state.nonces[kind]

# ------------------------
# Current value
# ------------------------
try:
    state = API.field_state(object_id, field_name, kind)
except requests.HTTPError as e:
    st.error(API.error_message(e))
    st.stop()

if state.get("notice"):
    st.warning(state["notice"])
st.caption("Current selection")
st.write(state["label"] or state["placeholder"])

if state["id"] and st.toggle("Show template value", key="pick_template"):
    try:
        show_record(API.get_field(object_id, field_name, "object")["value"], caption="Template value")
    except requests.HTTPError as e:
        st.error(API.error_message(e))

# ------------------------
# Search
# ------------------------
term = st.text_input("Search", placeholder="Name, email or ID", disabled=state["disabled"])
if st.button("Search", disabled=state["disabled"]):
    try:
        boot = _bootstrap(kind)
        res = API.search(kind, term, boot["nonce"])
        st.session_state.results = res["items"]
        if not res["items"]:
            st.info(boot["strings"]["noResults"])
        elif res.get("more"):
            st.caption("More results exist; refine the search to narrow them down.")
    except requests.HTTPError as e:
        st.session_state.results = []
        st.error(f"{_bootstrap(kind)['strings']['error']}: {API.error_message(e)}")

def _save(value: str, data=None):
    try:
        show_record(API.save_field(object_id, field_name, kind, value, data=data)["value"], caption="Stored value")
    except requests.HTTPError as e:
        st.error(API.error_message(e))

results = st.session_state.results
if results:
    show_results(results, kind)
    labels = {item["id"]: item["text"] for item in results}
    choice = st.selectbox("Select", list(labels), format_func=lambda i: labels[i])
    if st.button("Save selection"):
        _save(choice, next(item for item in results if item["id"] == choice))

if st.button("Clear selection"):
    _save("")
