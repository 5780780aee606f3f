"""Tests for the technique library, the session and synthetic data."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import re

import pytest

from legal_anonymizer import Session, SessionClosedError
from legal_anonymizer.errors import ConfigError
from legal_anonymizer.synthetic import SyntheticDataGenerator, ascii_fold
from legal_anonymizer.techniques import (
    GENERIC_EMAIL, GENERIC_PHONE, apply, generalize_address, generalize_amount,
    generalize_date, generic_name, initials, mask_partial_email, mask_partial_name,
    mask_partial_phone, mask_total, parse_brl,
)
from legal_anonymizer.validators import is_valid_cnpj, is_valid_cpf


# ── Masking ──────────────────────────────────────────────────────────

def test_mask_total_preserves_formatting():
    assert mask_total("111.444.777-35") == "***.***.***-**"
    assert mask_total("111.444.777-35", preserve_formatting=False) == "*" * 14


def test_mask_partial_identifiers():
    assert apply("111.444.777-35", "mask_partial", "tax_id").anonymized == "***.444.***-35"
    assert apply("11144477735", "mask_partial", "tax_id").anonymized == "***.444.***-35"
    assert apply("11.222.333/0001-81", "mask_partial", "company_id").anonymized == "**.***.***/0001-81"


def test_mask_partial_phone_keeps_layout():
    assert mask_partial_phone("(11) 98888-7777") == "(11) *****-7777"
    assert mask_partial_phone("+55 11 98888-7777") == "+55 11 *****-7777"
    assert mask_partial_phone("3333-4444") == "****-4444"


def test_mask_partial_email_and_name():
    assert mask_partial_email("maria@teste.com") == "m***a@teste.com"
    assert mask_partial_email("jo@teste.com") == "**@teste.com"
    assert mask_partial_name("Maria da Silva") == "M***a da S***a"


# ── Names ────────────────────────────────────────────────────────────

def test_initials_skip_connectives():
    assert initials("Maria da Silva Santos") == "M.S.S."
    assert apply("JOÃO DOS SANTOS", "initials", "person_name").anonymized == "J.S."


def test_generic_values():
    assert generic_name("Maria Silva") == "Fulano de Tal"
    assert generic_name("Maria da Silva") == "Fulano da Silva"
    assert generic_name("Maria da Silva Santos") == "Fulano de Tal Santos"
    assert apply("(11) 98888-7777", "generic", "phone").anonymized == GENERIC_PHONE
    assert apply("maria@teste.com", "generic", "email").anonymized == GENERIC_EMAIL


# ── Pseudonyms ───────────────────────────────────────────────────────

def test_pseudonym_consistent_within_session():
    with Session() as s:
        a = apply("Maria Silva", "pseudonym", "person_name", s)
        b = apply("João Souza", "pseudonym", "person_name", s)
        c = apply("Maria Silva", "pseudonym", "person_name", s)
        d = apply("11.222.333/0001-81", "pseudonym", "company_id", s)
        e = apply("111.444.777-35", "pseudonym", "tax_id", s)
    assert a.anonymized == c.anonymized == "PESSOA_001"
    assert b.anonymized == "PESSOA_002"
    assert d.anonymized == "EMPRESA_001"
    assert e.anonymized == "DOC_001"
    assert a.technique == "person_name/pseudonym"


def test_pseudonym_without_consistency():
    with Session() as s:
        a = apply("Maria Silva", "pseudonym", "person_name", s, keep_consistency=False)
        b = apply("Maria Silva", "pseudonym", "person_name", s, keep_consistency=False)
    assert (a.anonymized, b.anonymized) == ("PESSOA_001", "PESSOA_002")


# ── Synthetic ────────────────────────────────────────────────────────

def test_synthetic_identifiers_are_valid():
    with Session() as s:
        cpf = apply("111.444.777-35", "synthetic", "tax_id", s).anonymized
        raw = apply("52998224725", "synthetic", "tax_id", s).anonymized
        cnpj = apply("11.222.333/0001-81", "synthetic", "company_id", s).anonymized
    assert re.fullmatch(r"\d{3}\.\d{3}\.\d{3}-\d{2}", cpf) and is_valid_cpf(cpf)
    assert re.fullmatch(r"\d{11}", raw) and is_valid_cpf(raw)
    assert is_valid_cnpj(cnpj) and cnpj[11:15] == "0001"


def test_synthetic_consistent_within_session():
    with Session() as s:
        a = apply("Maria Silva", "synthetic", "person_name", s).anonymized
        apply("João Souza", "synthetic", "person_name", s)
        b = apply("Maria Silva", "synthetic", "person_name", s).anonymized
        upper = apply("MARIA SILVA", "synthetic", "person_name", s).anonymized
    assert a == b
    assert upper == upper.upper()


def test_synthetic_generator_deterministic():
    g1 = SyntheticDataGenerator(seed=42)
    g2 = SyntheticDataGenerator(seed=42)
    assert [g1.cpf(), g1.name(), g1.email()] == [g2.cpf(), g2.name(), g2.email()]


def test_synthetic_generator_shapes():
    gen = SyntheticDataGenerator(seed=7)
    for _ in range(20):
        assert re.fullmatch(r"\(\d{2}\) 9\d{4}-\d{4}", gen.phone())
        assert re.fullmatch(r"\(\d{2}\) [1-9]\d{3}-\d{4}", gen.phone(mobile=False))
        assert re.fullmatch(r"[a-z.]+\d*@[a-z0-9.\-]+", gen.email())
        assert 2 <= len(gen.name().split()) <= 3
        assert is_valid_cpf(gen.cpf(formatted=False))


def test_ascii_fold():
    assert ascii_fold("Débora João Gonçalves") == "Debora Joao Goncalves"


# ── Fallback ─────────────────────────────────────────────────────────

def test_illegal_technique_falls_back_to_total_mask():
    r = apply("maria@teste.com", "pseudonym", "email")
    assert r.fallback
    assert r.anonymized == "*****@*****.***"
    assert r.technique == "email/mask_total"


def test_unknown_technique_falls_back():
    r = apply("111.444.777-35", "rot13", "tax_id")
    assert r.fallback
    assert r.anonymized == "***.***.***-**"


def test_malformed_value_falls_back():
    r = apply("123", "mask_partial", "tax_id")
    assert r.fallback
    assert r.anonymized == "***"


def test_non_string_value_falls_back():
    r = apply(11144477735, "mask_partial", "tax_id")
    assert r.fallback
    assert r.original == "11144477735"
    assert r.anonymized == "*" * 11


# ── Generalization ───────────────────────────────────────────────────

def test_generalize_date():
    assert generalize_date("15/06/2023", "year") == "XX/XX/2023"
    assert generalize_date("15/06/2023", "month") == "XX/06/2023"
    assert generalize_date("15/06/2023", "decade") == "XX/XX/2020s"
    assert generalize_date("ontem", "year") == "ontem"
    with pytest.raises(ConfigError):
        generalize_date("15/06/2023", "century")


def test_generalize_amount():
    assert parse_brl("R$ 52.300,00") == 52300
    assert generalize_amount("R$ 52.300,00", "thousands") == "R$ 52.000,00+"
    assert generalize_amount("R$ 52.300,00", "ten_thousands") == "R$ 50.000,00+"
    assert generalize_amount("R$ 52.300,00", "range") == "R$ 50.000 - R$ 100.000"
    assert generalize_amount("R$ 1.500,00", "range") == "R$ 0 - R$ 10.000"
    assert generalize_amount("R$ 250.000,00", "range") == "R$ 100.000+"


def test_generalize_address():
    assert generalize_address("Rua das Flores, 123") == "Rua das Flores, XXX"
    assert generalize_address("Av. Paulista, nº 1000, apto 5") == "Av. Paulista, nº XXX, apto 5"


# ── Session ──────────────────────────────────────────────────────────

def test_session_get_or_create_calls_factory_once():
    calls = []
    with Session() as s:
        for _ in range(3):
            s.get_or_create("x", "value", lambda: calls.append(1) or "r")
        assert s.size == 1
    assert len(calls) == 1


def test_session_seed_scoped_to_session():
    s1, s2 = Session(), Session()
    assert s1.seed_for("Maria Silva") == s1.seed_for("Maria Silva")
    assert s1.seed_for("Maria Silva") != s2.seed_for("Maria Silva")


def test_session_close_wipes_state():
    s = Session()
    s.next_pseudonym("person", "PESSOA")
    s.get_or_create("pseudonym:person", "Maria", lambda: "PESSOA_001")
    s.close()
    s.close()   # idempotent
    assert s.closed
    assert s.size == 0
    with pytest.raises(SessionClosedError):
        s.next_pseudonym("person", "PESSOA")
    with pytest.raises(SessionClosedError):
        s.seed_for("Maria")


def test_session_counters_start_fresh():
    with Session() as s:
        assert s.next_pseudonym("person", "PESSOA") == "PESSOA_001"
    with Session() as s:
        assert s.next_pseudonym("person", "PESSOA") == "PESSOA_001"


# ── Properties ───────────────────────────────────────────────────────

@pytest.mark.parametrize("value", ["111.444.777-35", "Maria da Silva", "(11) 98888-7777"])
def test_mask_total_idempotent(value):
    once = mask_total(value)
    assert mask_total(once) == once


def test_partial_mask_keeps_shape():
    name = "Maria da Silva Santos"
    assert len(mask_partial_name(name).split()) == len(name.split())
    assert mask_partial_phone("(21) 3333-4444").startswith("(21) ")
    assert mask_partial_email("fulano.tal@tjsp.jus.br").endswith("@tjsp.jus.br")
