import random

import pytest

from gf2crc.crc_core import (
    BitVector,
    DivisionEnd,
    DivisionStart,
    DivisionStep,
    Polynomial,
    build_transmission,
    crc_bytes,
    divide,
    flip_bit,
    gf2_multiply,
    simulate_lfsr,
    verify_codeword,
)
from gf2crc.errors import DivisorZero, InvalidPolynomial, WidthMismatch

MESSAGE = BitVector.from_bits("10001000100010001000000110000001")
POLY = Polynomial.from_bits("1011011")


def test_divide_small_by_hand():
    q, r = divide(0b1101, 0b101)
    assert q == BitVector(0b11, 2)
    assert r == BitVector(0b10, 2)


def test_divide_short_circuit():
    rnd = random.Random(7)
    for _ in range(100):
        g = rnd.getrandbits(12) | (1 << 11)
        d = rnd.getrandbits(11)
        q, r = divide(d, g)
        assert q.value == 0
        assert r.value == d


def test_divide_identity():
    rnd = random.Random(42)
    for _ in range(300):
        d = rnd.getrandbits(rnd.randint(1, 64))
        g = rnd.getrandbits(rnd.randint(1, 16)) or 1
        q, r = divide(d, g)
        assert gf2_multiply(q.value, g) ^ r.value == d
        assert r.value.bit_length() < g.bit_length()


def test_divide_by_zero_is_fatal():
    with pytest.raises(DivisorZero):
        divide(0b1011, 0)
    with pytest.raises(DivisorZero):
        build_transmission(MESSAGE, 0)
    with pytest.raises(DivisorZero):
        simulate_lfsr(MESSAGE, 32, 0)


def test_divide_trace_does_not_change_result():
    trace = []
    assert divide(0b110101, 0b1011, trace) == divide(0b110101, 0b1011)
    assert isinstance(trace[0], DivisionStart)
    assert isinstance(trace[-1], DivisionEnd)
    steps = [e for e in trace if isinstance(e, DivisionStep)]
    # k - r + 1 vueltas
    assert len(steps) == 6 - 4 + 1
    assert [s.pipes for s in steps] == [2, 1, 0]
    assert [s.offset for s in steps] == [0, 1, 2]


def test_textbook_example():
    # 1101011011 / 10011 -> FCS 1110
    tx = build_transmission(BitVector.from_bits("1101011011"), Polynomial.from_bits("10011"))
    assert tx.fcs == BitVector(0b1110, 4)
    assert tx.codeword == BitVector.from_bits("11010110111110")


def test_sample_scenario():
    tx = build_transmission(MESSAGE, POLY)
    assert tx.codeword.width == 38
    assert tx.fcs.width == 6
    assert tx.codeword.value >> 6 == MESSAGE.value

    rem, ok = verify_codeword(tx.codeword, POLY)
    assert ok and rem.value == 0

    assert simulate_lfsr(MESSAGE, 32, POLY) == tx.fcs


def test_single_bit_flip_is_detected():
    tx = build_transmission(MESSAGE, POLY)
    rem, ok = verify_codeword(flip_bit(tx.codeword, 5), POLY)
    assert not ok and rem.value != 0
    for pos in range(tx.codeword.width):
        assert not verify_codeword(flip_bit(tx.codeword, pos), POLY)[1]


def test_codeword_divisible_and_lfsr_matches_division():
    rnd = random.Random(2024)
    for _ in range(200):
        width = rnd.randint(0, 48)
        msg = BitVector(rnd.getrandbits(width) if width else 0, width)
        poly = Polynomial(rnd.getrandbits(rnd.randint(1, 17)) | 1)
        if poly.value <= 1:
            poly = Polynomial(0b11)
        tx = build_transmission(msg, poly)
        assert divide(tx.codeword, poly).remainder.value == 0
        assert simulate_lfsr(msg.value, width, poly) == tx.fcs


def test_lfsr_flush_and_trace():
    trace = []
    fcs = simulate_lfsr(0b1, 1, Polynomial(0b11), trace)
    assert fcs == BitVector(1, 1)
    assert [(e.bit_in, e.msb_old, e.before, e.after, e.flushing) for e in trace] == [
        (1, 0, 0, 1, False),
        (0, 1, 1, 1, True),
    ]


def test_lfsr_rejects_short_width():
    with pytest.raises(WidthMismatch):
        simulate_lfsr(0b1000, 3, POLY)


def test_degree_zero_polynomial():
    tx = build_transmission(BitVector(0b1011, 4), Polynomial(1))
    assert tx.fcs == BitVector(0, 0)
    assert simulate_lfsr(0b1011, 4, Polynomial(1)) == tx.fcs


def test_polynomial_from_bits():
    assert POLY.degree == 6
    assert POLY.taps == 0b011011
    assert str(POLY) == "x^6 + x^4 + x^3 + x + 1"
    with pytest.raises(InvalidPolynomial):
        Polynomial.from_bits("0011")
    with pytest.raises(DivisorZero):
        Polynomial.from_bits("000")


def test_bitvector_width_checks():
    assert BitVector.from_bits("0010").bits() == "0010"
    assert BitVector.of(5) == BitVector(5, 3)
    with pytest.raises(WidthMismatch):
        BitVector.of(0b1111, 2)


def test_flip_bit_bounds():
    v = BitVector(0b1000, 4)
    assert flip_bit(v, 0) == BitVector(0, 4)
    assert flip_bit(v, 3) == BitVector(0b1001, 4)
    with pytest.raises(IndexError):
        flip_bit(v, 4)


def test_crc_bytes_matches_division():
    data = b"hola"
    poly = Polynomial.from_bits("100000111")
    expected = build_transmission(BitVector(int.from_bytes(data, "big"), 32), poly).fcs
    assert crc_bytes(data, poly) == expected


def test_build_transmission_trace_does_not_change_result():
    trace = []
    assert build_transmission(MESSAGE, POLY, trace) == build_transmission(MESSAGE, POLY)
    assert isinstance(trace[0], DivisionStart)
    assert isinstance(trace[-1], DivisionEnd)


def test_simulate_lfsr_trace_does_not_change_result():
    trace = []
    assert simulate_lfsr(MESSAGE, 32, POLY, trace) == simulate_lfsr(MESSAGE, 32, POLY)
    # 32 bits de mensaje + 6 de vaciado
    assert len(trace) == 32 + 6
    assert [e.flushing for e in trace[-6:]] == [True] * 6
