class CrcError(ValueError):
    """Base de todos los errores de precondición del motor CRC."""


class DivisorZero(CrcError):
    """Se intentó dividir por el polinomio 0."""


class WidthTruncationHazard(CrcError):
    """Formatear con un ancho menor a los bits significativos perdería bits altos."""


class WidthMismatch(CrcError):
    """El ancho declarado no alcanza para el valor (o es negativo)."""


class InvalidPolynomial(CrcError):
    """El polinomio no arranca en 1 (coeficiente de grado máximo)."""
