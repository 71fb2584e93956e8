from typing import List, Tuple

from gf2crc.errors import WidthTruncationHazard


def bit_length(x: int) -> int:
    """
    Cantidad de bits significativos de x: 0 para 0, si no la posición del
    bit más alto + 1.
    """
    if x < 0:
        raise ValueError("solo enteros sin signo")
    return x.bit_length()


def format_binary(x: int, width: int, truncate: bool = False) -> str:
    """
    Devuelve exactamente `width` dígitos binarios, rellenando con ceros a la
    izquierda. Con width <= 0 devuelve "0".

    Si x no entra en `width` bits se levanta WidthTruncationHazard, salvo que
    se pida truncate=True: ahí se muestra x mod 2**width a propósito.
    """
    if width <= 0:
        return "0"
    if bit_length(x) > width:
        if not truncate:
            raise WidthTruncationHazard(
                f"{x:#b} tiene {bit_length(x)} bits y el ancho pedido es {width}"
            )
        x &= (1 << width) - 1
    return format(x, f"0{width}b")


def bits_from_bytes(data: bytes) -> List[int]:
    """
    Convierte bytes a una lista de bits [0/1] en orden MSB→LSB.
    """
    bits: List[int] = []
    for b in data:
        for i in range(7, -1, -1):
            bits.append((b >> i) & 1)
    return bits


def is_bitstring(s: str) -> bool:
    """¿La cadena tiene solo 0/1 (ignorando espacios)?"""
    s2 = s.replace(" ", "")
    return len(s2) > 0 and set(s2) <= {"0", "1"}


def parse_bitstring(s: str) -> Tuple[int, int]:
    """
    Convierte "1010 0111" a (valor, ancho). Los ceros a la izquierda cuentan
    para el ancho, que no se puede deducir del valor solo.
    """
    s2 = s.strip().replace(" ", "")
    if not is_bitstring(s2):
        raise ValueError(f"solo 0/1 en cadenas de bits: {s!r}")
    return int(s2, 2), len(s2)


def bits_from_hex(h: str) -> str:
    """"0x1a" o "1A" → "00011010" (4 bits por dígito hex)."""
    h = h.strip().replace(" ", "").lower()
    if h.startswith("0x"):
        h = h[2:]
    if not h:
        raise ValueError("cadena hex vacía")
    try:
        return "".join(f"{int(ch, 16):04b}" for ch in h)
    except ValueError:
        raise ValueError(f"hex inválido: {h!r}") from None
