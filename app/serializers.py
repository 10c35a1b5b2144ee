from app.currency import CurrencyInfo, currency_decimals, format_money
from app.exchange import FxConversion
from app.receipt.base import ParsedReceipt


def serialize_fx_conversion(conversion: FxConversion) -> dict:
    return {
        "from": conversion.from_currency,
        "to": conversion.to_currency,
        "amount": conversion.amount,
        "rateToBase": conversion.rate_to_base,
        "amountBase": conversion.amount_base,
        "asOf": conversion.as_of.isoformat(),
        "display": format_money(conversion.amount_base, conversion.to_currency),
    }


def serialize_currency(info: CurrencyInfo) -> dict:
    return {
        "code": info.code,
        "symbol": info.symbol,
        "name": info.name,
        "decimals": currency_decimals(info.code),
    }


def serialize_parsed_receipt(receipt: ParsedReceipt) -> dict:
    return {
        "amount": receipt.amount,
        "currency": receipt.currency,
        "date": receipt.date,
        "merchant": receipt.merchant,
        "confidence": {
            "amount": receipt.confidence.amount,
            "currency": receipt.confidence.currency,
            "date": receipt.confidence.date,
            "merchant": receipt.confidence.merchant,
        },
    }
