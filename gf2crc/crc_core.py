from typing import List, NamedTuple, Optional, Tuple, Union

from gf2crc.bits import bit_length, bits_from_bytes, format_binary, parse_bitstring
from gf2crc.errors import DivisorZero, InvalidPolynomial, WidthMismatch


class BitVector(NamedTuple):
    """
    Entero sin signo + ancho explícito. El ancho no sale del valor: los ceros
    a la izquierda importan (para mostrar y para armar la división).
    """
    value: int
    width: int

    @classmethod
    def of(cls, value: int, width: Optional[int] = None) -> "BitVector":
        if value < 0:
            raise WidthMismatch(f"valor negativo: {value}")
        n = bit_length(value)
        if width is None:
            width = n
        if width < n:
            raise WidthMismatch(f"{value:#b} no entra en {width} bits")
        return cls(value, width)

    @classmethod
    def from_bits(cls, s: str) -> "BitVector":
        value, width = parse_bitstring(s)
        return cls(value, width)

    def bits(self) -> str:
        return format_binary(self.value, self.width)


class Polynomial(NamedTuple):
    """
    Generador del CRC. El bit de la posición `degree` es el coeficiente
    principal; los `degree` bits bajos son los taps del LFSR.
    """
    value: int

    @classmethod
    def from_bits(cls, s: str) -> "Polynomial":
        value, width = parse_bitstring(s)
        if value == 0:
            raise DivisorZero("el polinomio no puede ser cero")
        if bit_length(value) != width:
            raise InvalidPolynomial(
                f"el polinomio debe iniciar en 1 (coeficiente de grado máximo): {s!r}"
            )
        return cls(value)

    @property
    def degree(self) -> int:
        return bit_length(self.value) - 1

    @property
    def width(self) -> int:
        return bit_length(self.value)

    @property
    def taps(self) -> int:
        # el x^m queda implícito, no se guarda en la máscara
        return self.value & ((1 << self.degree) - 1) if self.degree > 0 else 0

    def bits(self) -> str:
        return format_binary(self.value, self.width)

    def __str__(self) -> str:
        m = self.degree
        terms = []
        for i in range(m, -1, -1):
            if (self.value >> i) & 1:
                terms.append("1" if i == 0 else "x" if i == 1 else f"x^{i}")
        return " + ".join(terms) if terms else "0"


class DivisionResult(NamedTuple):
    quotient: BitVector
    remainder: BitVector


class Transmission(NamedTuple):
    codeword: BitVector
    fcs: BitVector


# ---- eventos de traza: solo se arman si el que llama pasa una lista ----

class DivisionStart(NamedTuple):
    dividend: int
    divisor: int
    dividend_width: int
    divisor_width: int
    short_circuit: bool


class DivisionStep(NamedTuple):
    offset: int        # espacios a la izquierda (k - r - aux)
    pipes: int         # guías '|' a la derecha (aux antes de bajar el bit)
    quotient_bit: int
    subtracted: int    # divisor o 0
    remainder: int     # resto ya con el bit siguiente bajado


class DivisionEnd(NamedTuple):
    quotient: BitVector
    remainder: BitVector


class LfsrStep(NamedTuple):
    step: int
    bit_in: int
    msb_old: int
    before: int
    after: int
    width: int
    flushing: bool


TraceEvent = Union[DivisionStart, DivisionStep, DivisionEnd, LfsrStep]
Operand = Union[int, BitVector, Polynomial]


def _value(x: Operand) -> int:
    v = x if isinstance(x, int) else x.value
    if v < 0:
        raise WidthMismatch(f"valor negativo: {v}")
    return v


def _polynomial(p: Operand) -> Polynomial:
    poly = p if isinstance(p, Polynomial) else Polynomial(_value(p))
    if poly.value == 0:
        raise DivisorZero("el polinomio no puede ser cero")
    return poly


def _message(message: Union[int, BitVector]) -> BitVector:
    if isinstance(message, BitVector):
        return BitVector.of(message.value, message.width)
    return BitVector.of(message)


def divide(dividend: Operand, divisor: Operand,
           trace: Optional[List[TraceEvent]] = None) -> DivisionResult:
    """
    División larga módulo 2 (XOR, sin acarreos).

    Arranca con los r bits altos del dividendo y en cada vuelta decide el bit
    del cociente mirando solo si el resto tiene la misma cantidad de bits que
    el divisor (no se comparan magnitudes). Después baja el próximo bit.

    Si el dividendo tiene menos bits que el divisor no hay vueltas: cociente 0
    y resto = dividendo.
    """
    dvd = _value(dividend)
    dvs = _value(divisor)
    if dvs == 0:
        raise DivisorZero("el divisor no puede ser cero")

    k = bit_length(dvd)
    r = bit_length(dvs)
    aux = k - r

    if aux < 0:
        result = DivisionResult(BitVector(0, 1), BitVector(dvd, r - 1))
        if trace is not None:
            trace.append(DivisionStart(dvd, dvs, k, r, True))
            trace.append(DivisionEnd(*result))
        return result

    if trace is not None:
        trace.append(DivisionStart(dvd, dvs, k, r, False))

    quo = 0
    rem = dvd >> aux
    while aux > -1:
        offset, pipes = k - r - aux, aux
        quo <<= 1
        if bit_length(rem) == r:
            quo |= 1
            rem ^= dvs
            q_bit, sub = 1, dvs
        else:
            q_bit, sub = 0, 0

        aux -= 1
        if aux > -1:
            rem = (rem << 1) | ((dvd >> aux) & 1)

        if trace is not None:
            trace.append(DivisionStep(offset, pipes, q_bit, sub, rem))

    result = DivisionResult(BitVector(quo, k - r + 1), BitVector(rem, r - 1))
    if trace is not None:
        trace.append(DivisionEnd(*result))
    return result


def build_transmission(message: Union[int, BitVector], polynomial: Operand,
                       trace: Optional[List[TraceEvent]] = None) -> Transmission:
    """
    Lado emisor: desplaza el mensaje m lugares (m = grado), lo divide por el
    polinomio y mete el resto (FCS) en los m bits bajos.
    """
    msg = _message(message)
    poly = _polynomial(polynomial)
    m = poly.degree
    shifted = BitVector(msg.value << m, msg.width + m)
    _, rem = divide(shifted, poly, trace)
    codeword = BitVector(shifted.value ^ rem.value, shifted.width)
    return Transmission(codeword, BitVector(rem.value, m))


def verify_codeword(codeword: Union[int, BitVector], polynomial: Operand,
                    trace: Optional[List[TraceEvent]] = None) -> Tuple[BitVector, bool]:
    """Lado receptor: (resto, ok). Un codeword sano deja resto 000..0."""
    _, rem = divide(codeword, _polynomial(polynomial), trace)
    return rem, rem.value == 0


def simulate_lfsr(message: Union[int, BitVector], message_width: Optional[int],
                  polynomial: Operand,
                  trace: Optional[List[TraceEvent]] = None) -> BitVector:
    """
    Registro de m bits cableado para dividir por el polinomio.

    Por cada bit de entrada (MSB primero): se mira el MSB viejo, se hace
    shift metiendo el bit, y si ese MSB era 1 → XOR con los taps. Después de
    los bits del mensaje van m ceros más; sin ellos el registro no queda con
    el resto de la división.
    """
    value = _value(message)
    if message_width is None:
        message_width = message.width if isinstance(message, BitVector) else bit_length(value)
    if message_width < 0 or message_width < bit_length(value):
        raise WidthMismatch(f"{value:#b} no entra en {message_width} bits")

    poly = _polynomial(polynomial)
    m = poly.degree
    mask = (1 << m) - 1
    taps = poly.taps

    reg = 0
    for step in range(message_width + m):
        flushing = step >= message_width
        bit = 0 if flushing else (value >> (message_width - 1 - step)) & 1
        msb_old = (reg >> (m - 1)) & 1 if m > 0 else 0
        before = reg
        reg = ((reg << 1) | bit) & mask
        if msb_old:
            reg ^= taps
        if trace is not None:
            trace.append(LfsrStep(step, bit, msb_old, before, reg, m, flushing))

    return BitVector(reg, m)


def crc_bytes(data: bytes, polynomial: Operand) -> BitVector:
    """El mismo LFSR pero sobre un payload en bytes (MSB→LSB por byte)."""
    value = 0
    bits = bits_from_bytes(data)
    for b in bits:
        value = (value << 1) | b
    return simulate_lfsr(value, len(bits), polynomial)


def flip_bit(vector: BitVector, position: int) -> BitVector:
    """Invierte el bit `position` contando desde el MSB (0). Sirve para simular ruido."""
    if not 0 <= position < vector.width:
        raise IndexError(f"bit {position} fuera de 0..{vector.width - 1}")
    return BitVector(vector.value ^ (1 << (vector.width - 1 - position)), vector.width)


def gf2_multiply(a: int, b: int) -> int:
    """Producto de polinomios en GF(2): sumas desplazadas con XOR."""
    out = 0
    shift = 0
    while b >> shift:
        if (b >> shift) & 1:
            out ^= a << shift
        shift += 1
    return out
