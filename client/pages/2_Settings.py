# client/pages/2_Settings.py
import requests
import streamlit as st
import api as API

st.title("⚙️ Stripe connection")

try:
    status = API.settings()
except requests.HTTPError as e:
    st.error(API.error_message(e))
    st.stop()

st.subheader("Connection Status")
if status["connected"]:
    st.success(f"Stripe requests will use the secret key from: {status['source']} ({status['secret_key_hint']})")
else:
    st.warning("Enter your Stripe secret key to allow the field to load Stripe records.")

st.subheader("Stripe API Credentials")
st.caption("Paste a restricted or full-access secret key that can read customers, subscriptions and products.")
key = st.text_input("Stripe Secret Key", type="password", placeholder="sk_live_...")
if st.button("Save"):
    try:
        st.json(API.save_settings(key))
    except requests.HTTPError as e:
        st.error(API.error_message(e))
