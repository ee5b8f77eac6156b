from decimal import ROUND_HALF_UP, Decimal

from django.utils.http import urlencode

CENTS = Decimal('0.01')

# gera a imagem do QR quando o serviço não tem uma própria
QR_CODE_SERVICE = 'https://api.qrserver.com/v1/create-qr-code/'


def format_brl(value):
    """Formata um valor em reais: Decimal('1234.5') -> 'R$ 1.234,50'."""
    value = Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    integer, _, cents = f"{abs(value):,.2f}".partition('.')
    sign = '-' if value < 0 else ''
    return f"{sign}R$ {integer.replace(',', '.')},{cents}"


def deposit_amount(service):
    # sinal cobrado via Pix: metade do preço do serviço
    return (Decimal(service.price) / 2).quantize(CENTS, rounding=ROUND_HALF_UP)


def qr_code_url(service):
    if service.pix_qr_url:
        return service.pix_qr_url
    if not service.pix_key:
        return None
    return f"{QR_CODE_SERVICE}?{urlencode({'size': '200x200', 'data': service.pix_key})}"


def payment_info(service):
    deposit = deposit_amount(service)
    return {
        'pix_key': service.pix_key,
        'pix_qr_url': qr_code_url(service),
        'price': str(service.price),
        'price_display': format_brl(service.price),
        'deposit': str(deposit),
        'deposit_display': format_brl(deposit),
    }
