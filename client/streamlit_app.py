# client/streamlit_app.py
import requests
import streamlit as st
import api as API

st.set_page_config(page_title="Stripe Field Client", layout="wide")
st.title("💳 Stripe Field Client")

st.markdown("""
Stand-in for the form editor's dropdown.

- **🔎 Pick**: show a stored field, search Stripe customers, subscriptions or products, save a selection.
- **⚙️ Settings**: connection status and the stored secret key (admin token required).
""")

with st.sidebar:
    st.header("Service")
    st.text_input("API Base URL", value=API.API, disabled=True)
    st.text_input("Token", value="set" if API.TOKEN else "missing", disabled=True)
    if st.button("Health check"):
        try:
            health = API.healthz()
        except requests.RequestException as e:
            st.error(f"Health check failed: {e}")
        else:
            if health["connected"]:
                st.success("Service up, Stripe connected")
            else:
                st.warning("Service up, no Stripe secret key configured")

st.info("Set `API_BASE_URL` and `STRIPE_FIELD_TOKEN` in `client/.env`, then `streamlit run client/streamlit_app.py`.")
