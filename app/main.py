import argparse
import sys
from typing import List, Optional

from app.config import load_env, settings_from_env
from gf2crc.bits import bits_from_hex
from gf2crc.crc_core import (
    BitVector,
    Polynomial,
    build_transmission,
    flip_bit,
    simulate_lfsr,
    verify_codeword,
)
from gf2crc.errors import CrcError, WidthMismatch
from report.render import render_trace
from report.sinks import ConsoleSink, TeeLogger, open_file_sink


def _empty_note(fcs: BitVector) -> str:
    # grado 0: el FCS no tiene bits, format_binary igual muestra "0"
    return "  (vacío)" if fcs.width == 0 else ""


def check_settings(settings) -> None:
    """
    Valida mensaje, polinomio y --flip antes de escribir nada: si algo está
    mal no queremos un resultado_crc.txt a medias.
    """
    msg = BitVector.from_bits(settings.message_bits)
    poly = Polynomial.from_bits(settings.poly_bits)
    width = msg.width + poly.degree
    if settings.flip is not None and not 0 <= settings.flip < width:
        raise WidthMismatch(f"--flip {settings.flip} fuera de 0..{width - 1} (codeword de {width} bits)")


def run(settings, log: TeeLogger) -> int:
    """
    Hace las tres partes de la demo y las manda al logger:
      1) CRC por división módulo 2 con pasos + verificación en recepción
      2/3) tabla del LFSR y comparación de los dos FCS
    Devuelve 0 si todo cerró, 1 si los FCS divergen o la verificación falló.
    """
    msg = BitVector.from_bits(settings.message_bits)
    poly = Polynomial.from_bits(settings.poly_bits)
    m = poly.degree
    trace: Optional[List] = [] if settings.verbose else None

    log.emit("")
    log.emit("=== ITEM 1: CRC por división en módulo 2 (con pasos) ===")
    log.emit("")
    log.emit(f"Polinomio (G): {poly.bits()}  = {poly}  (grado={m})")
    tx = build_transmission(msg, poly, trace)
    if trace is not None:
        log.emit_lines(render_trace(trace))
        trace.clear()

    log.emit("")
    log.emit(f"FCS (división): 0b{tx.fcs.bits()}" + _empty_note(tx.fcs))
    log.emit(f"Mensaje transmitido (codeword): 0b{tx.codeword.bits()}")
    log.emit("")

    received = tx.codeword
    if settings.flip is not None:
        received = flip_bit(tx.codeword, settings.flip)
        log.emit(f"Bit {settings.flip} invertido en el canal: 0b{received.bits()}")

    log.emit("Verificación en la recepción (codeword ÷ polinomio):")
    _, ok = verify_codeword(received, poly, trace)
    if trace is not None:
        log.emit_lines(render_trace(trace))
        trace.clear()
    log.emit("")
    log.emit("Transmisión con éxito!" if ok else "Falla en la transmisión.")

    log.emit("")
    log.emit("=== ITEM 2 y 3: LFSR simplificado + tabla de evolución ===")
    log.emit("")
    fcs_lfsr = simulate_lfsr(msg, msg.width, poly, trace)
    if trace is not None:
        log.emit_lines(render_trace(trace))

    same = fcs_lfsr == tx.fcs
    log.emit("")
    log.emit(f"FCS (LFSR):     0b{fcs_lfsr.bits()}" + _empty_note(fcs_lfsr))
    log.emit(f"Comparación:     {'OK' if same else 'DIVERGE'}")
    log.emit("")
    return 0 if same and ok else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="CRC por división GF(2) y por LFSR, con pasos")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--msg", help="mensaje en bits, p. ej. 11010011101100")
    src.add_argument("--hex", help="mensaje en hex, p. ej. 012345 o 0x012345")
    p.add_argument("--gen", help="polinomio en bits, p. ej. 1011011")
    p.add_argument("--salida", help="archivo donde duplicar la salida")
    p.add_argument("--sin-archivo", action="store_true",
                   help="solo consola, no escribir archivo")
    p.add_argument("--flip", type=int, default=None,
                   help="invierte el bit N (desde el MSB) del codeword antes de verificar")
    p.add_argument("--quiet", action="store_true",
                   help="solo resultados, sin los pasos")
    p.add_argument("--env", default=".env", help="archivo .env con la config")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    a = build_parser().parse_args(argv)

    try:
        s = settings_from_env(load_env(a.env))
        if a.msg:
            s = s._replace(message_bits=a.msg)
        elif a.hex:
            s = s._replace(message_bits=bits_from_hex(a.hex))
        if a.gen:
            s = s._replace(poly_bits=a.gen)
        if a.salida:
            s = s._replace(output=a.salida)
        if a.sin_archivo:
            s = s._replace(output=None)
        if a.flip is not None:
            s = s._replace(flip=a.flip)
        if a.quiet:
            s = s._replace(verbose=False)
        check_settings(s)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    log = TeeLogger(ConsoleSink())
    if s.output:
        fs = open_file_sink(s.output)
        if fs is not None:
            log.subscribe(fs)

    try:
        return run(s, log)
    except (CrcError, ValueError, IndexError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        log.close()


if __name__ == "__main__":
    sys.exit(main())
