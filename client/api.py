import os, requests
from dotenv import load_dotenv
load_dotenv()
API = os.getenv("API_BASE_URL", "http://localhost:8000")
TOKEN = os.getenv("STRIPE_FIELD_TOKEN", "")
S = requests.Session(); S.headers.update({"Content-Type":"application/json"})
if TOKEN:
    S.headers["Authorization"] = f"Bearer {TOKEN}"

def error_message(e: requests.HTTPError) -> str:
    """Pull {"detail": {"message": ...}} out of an API error, if present."""
    try:
        detail = e.response.json().get("detail")
    except ValueError:
        return str(e)
    if isinstance(detail, dict):
        return detail.get("message") or str(detail)
    return str(detail or e)

def healthz():   r=S.get(f"{API}/healthz",timeout=10); r.raise_for_status(); return r.json()
def nonce(kind): r=S.get(f"{API}/nonce/{kind}",timeout=10); r.raise_for_status(); return r.json()
def settings():  r=S.get(f"{API}/settings",timeout=10); r.raise_for_status(); return r.json()

def search(kind: str, term: str, nonce_value: str):
    r = S.get(f"{API}/search/{kind}", params={"search": term},
              headers={"X-Field-Nonce": nonce_value}, timeout=60)
    r.raise_for_status()
    return r.json()

def field_state(object_id: str, field_name: str, kind: str):
    r = S.get(f"{API}/objects/{object_id}/fields/{field_name}/state", params={"kind": kind}, timeout=30)
    r.raise_for_status()
    return r.json()

def get_field(object_id: str, field_name: str, return_format: str = "id"):
    r = S.get(f"{API}/objects/{object_id}/fields/{field_name}",
              params={"return_format": return_format}, timeout=30)
    r.raise_for_status()
    return r.json()

def save_field(object_id: str, field_name: str, kind: str, value: str, data=None):
    body = {"kind": kind, "value": value, "data": data}
    r = S.put(f"{API}/objects/{object_id}/fields/{field_name}", json=body, timeout=60)
    r.raise_for_status()
    return r.json()

def save_settings(secret_key: str):
    r = S.put(f"{API}/settings", json={"secret_key": secret_key}, timeout=10)
    r.raise_for_status()
    return r.json()
