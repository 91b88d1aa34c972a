from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping

CENT = Decimal("0.01")

# Tope de las columnas NUMERIC(10, 2)
MAX_AMOUNT = Decimal("99999999.99")

# Orden del formulario de corte: 5 billetes y 6 monedas
DENOMINATIONS = {
    "bills_100": Decimal("100"),
    "bills_50": Decimal("50"),
    "bills_20": Decimal("20"),
    "bills_10": Decimal("10"),
    "bills_5": Decimal("5"),
    "coins_toonies": Decimal("2"),
    "coins_loonies": Decimal("1"),
    "coins_quarters": Decimal("0.25"),
    "coins_dimes": Decimal("0.10"),
    "coins_nickels": Decimal("0.05"),
    "coins_pennies": Decimal("0.01"),
}


def to_cents(value) -> Decimal:
    """Redondea a centavos (mitad hacia arriba, lejos de cero)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_total(counts: Mapping[str, int]) -> Decimal:
    """
    Total del conteo: suma de cantidad x valor de cada denominación.
    Las denominaciones ausentes cuentan como 0. No valida negativos
    (eso lo hace quien llama).
    """
    total = Decimal("0")
    for field, value in DENOMINATIONS.items():
        total += Decimal(int(counts.get(field) or 0)) * value
    return to_cents(total)
