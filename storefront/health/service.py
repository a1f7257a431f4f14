from urllib.parse import urlparse
import socket
from typing import Any, Dict

from storefront.config import SUPABASE_URL, MIDTRANS_API_URL, MIDTRANS_SERVER_KEY
import storefront.infra.supabase_client as supabase_client

TABLES = ("users", "products", "orders", "order_items")

def _check_table(client, name: str) -> Dict[str, Any]:
    try:
        res = client.table(name).select("*").limit(1).execute()
        cnt = len(res.data or [])
        return {"ok": True, "rows": cnt}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_supabase_info() -> Dict[str, Any]:
    """Diagnostic Supabase: DNS, connexion et lecture d'une ligne par table du checkout."""
    parsed = urlparse(SUPABASE_URL) if SUPABASE_URL else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info: Dict[str, Any] = {
        "supabase_url": SUPABASE_URL,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = supabase_client.get_service_supabase()
        for t in TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info

def health_gateway_info() -> Dict[str, Any]:
    # Jamais la clé elle-même: seulement sa présence
    return {
        "api_url": MIDTRANS_API_URL,
        "server_key_configured": bool(MIDTRANS_SERVER_KEY),
    }
