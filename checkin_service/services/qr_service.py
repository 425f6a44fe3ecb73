"""
QR rendering for guest scan tokens.
"""

import base64
import io
import qrcode

QR_COLORS = {
    "vip": "#f59e0b",
    "regular": "#8b5cf6",
}


def render_qr_png(guest, box_size=14, border=2):
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(guest.qr_code)
    qr.make(fit=True)

    img = qr.make_image(
        fill_color=QR_COLORS.get(guest.guest_type, QR_COLORS["regular"]),
        back_color="white",
    )
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def render_qr_data_url(guest):
    encoded = base64.b64encode(render_qr_png(guest)).decode()
    return f"data:image/png;base64,{encoded}"
