import base64, hashlib, hmac, io, secrets
import qrcode
from studio.core.config import settings

def build_checkin_token(member_id: int, session_id: int) -> str:
    # nonce novo a cada ativação: reativar a reserva invalida o QR antigo
    nonce = secrets.token_hex(16)
    msg = f"{member_id}:{session_id}:{nonce}".encode()
    return hmac.new(key=settings.SECRET_KEY.encode(), msg=msg, digestmod=hashlib.sha256).hexdigest()[:32]

def render_qr_png(token: str) -> bytes:
    img = qrcode.make(token)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()

def render_qr_data_uri(token: str) -> str:
    b64 = base64.b64encode(render_qr_png(token)).decode("ascii")
    return f"data:image/png;base64,{b64}"
