from typing import Iterable, List

from gf2crc.bits import format_binary
from gf2crc.crc_core import DivisionEnd, DivisionStart, DivisionStep, LfsrStep, TraceEvent

LFSR_HEADER = "paso | i | msb(old) |  r[m-1]..r[0]      ->   r'[m-1]..r'[0]"


def _b(x: int, width: int) -> str:
    return "0b" + format_binary(x, width)


def render_trace(events: Iterable[TraceEvent]) -> List[str]:
    """
    Convierte los eventos de divide()/simulate_lfsr() en líneas de texto,
    con el mismo dibujo de "papel y lápiz" de la división y la tabla del LFSR.
    Una misma lista puede traer varias corridas seguidas.
    """
    lines: List[str] = []
    r = 0
    short = False
    for ev in events:
        if isinstance(ev, DivisionStart):
            r = ev.divisor_width
            short = ev.short_circuit
            title = "División módulo 2"
            if short:
                title += " (dividendo menor que divisor)"
            lines.append(title)
            lines.append(f"{_b(ev.dividend, ev.dividend_width)} |__ {_b(ev.divisor, r)}")
        elif isinstance(ev, DivisionStep):
            binw = 2 + r
            lines.append(" " * ev.offset + _b(ev.subtracted, r) + "|" * ev.pipes)
            lines.append(" " * ev.offset + "-" * binw + "|" * ev.pipes)
            lines.append(" " * (ev.offset + 1) + _b(ev.remainder, r) + "|" * max(ev.pipes - 1, 0))
        elif isinstance(ev, DivisionEnd):
            if short:
                lines.append("Cociente: 0b0")
                lines.append(f"Resto:     {_b(ev.remainder.value, r)}")
            else:
                # el cociente va con su ancho real, no recortado a r bits
                lines.append("")
                lines.append(f"Cociente: {_b(ev.quotient.value, ev.quotient.width)}")
                lines.append(f"Resto: {_b(ev.remainder.value, r)}")
        elif isinstance(ev, LfsrStep):
            if ev.step == 0:
                lines.append(LFSR_HEADER)
            before = format_binary(ev.before, ev.width)
            after = format_binary(ev.after, ev.width)
            lines.append(f"{ev.step:5d} | {ev.bit_in} |     {ev.msb_old}     |  {before:<16} ->   {after}")
        else:
            raise TypeError(f"evento de traza desconocido: {ev!r}")
    return lines
