"""
Rendu des QR codes des passes.
Le QR encode le JSON {"token": ...} ; l'image PNG est renvoyée en data URI.
"""

import base64
import io
import json

import qrcode


def generate_qr_image(payload: str) -> bytes:
    """Génère une image PNG du QR code encodant le contenu donné."""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def build_qr_payload(token: str) -> str:
    """Retourne le data URI (image/png) du QR code d'un token de pass."""
    png = generate_qr_image(json.dumps({"token": token}))
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")
