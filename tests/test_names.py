"""Tests for person-name detection and the lexicon."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest
import yaml

from legal_anonymizer.errors import ConfigError
from legal_anonymizer.lexicon import LEXICON_ENV, Lexicon, default_lexicon, load_lexicon
from legal_anonymizer.names import (
    contextual_pass, mixed_case_pass, scan_names, uppercase_pass, validate_name,
)


# ── Validation ───────────────────────────────────────────────────────

def test_validate_common_name():
    verdict = validate_name("Maria da Silva Santos", "mixed_case")
    assert verdict.valid
    assert verdict.confidence == 0.9


def test_validate_uncommon_name():
    verdict = validate_name("Xisto Quaresma", "mixed_case")
    assert verdict.valid
    assert verdict.confidence == 0.7


def test_validate_confidence_capped():
    verdict = validate_name("MARIA DA SILVA SANTOS", "uppercase")
    assert verdict.confidence == 0.98
    assert validate_name("Maria Silva", "contextual").confidence == 0.98


@pytest.mark.parametrize("candidate", [
    "Maria",                               # single word
    "da Silva Santos",                     # leading connective
    "Maria Silva de",                      # trailing connective
    "Tribunal de Justiça",                 # denylisted word
    "CONTRATO DE LOCAÇÃO",                 # document title
    "Ana Bia Cris Dani Edu Fabi Gabi",     # too many words
    "Maria Silva 2",
])
def test_validate_rejects(candidate):
    assert not validate_name(candidate, "mixed_case").valid


# ── Passes ───────────────────────────────────────────────────────────

def test_uppercase_pass():
    matches = uppercase_pass("O REQUERENTE JOSÉ DOS SANTOS PEREIRA compareceu.")
    assert matches == []   # the role label makes the whole run a non-name

    matches = uppercase_pass("Assina: JOSÉ DOS SANTOS PEREIRA.")
    assert [m.value for m in matches] == ["JOSÉ DOS SANTOS PEREIRA"]
    assert matches[0].source == "uppercase"


def test_mixed_case_pass():
    matches = mixed_case_pass("Nesta data compareceu Maria da Silva, brasileira, casada.")
    assert [m.value for m in matches] == ["Maria da Silva"]
    assert matches[0].confidence == 0.9


def test_contextual_pass_trims_at_denied_word():
    text = "Requerido: JOÃO PEREIRA CPF 111.444.777-35"
    matches = contextual_pass(text)
    assert [m.value for m in matches] == ["JOÃO PEREIRA"]
    m = matches[0]
    assert text[m.start:m.end] == "JOÃO PEREIRA"
    assert m.source == "contextual"
    assert m.confidence == 0.98


def test_institutions_not_names():
    text = "TRIBUNAL DE JUSTIÇA DO ESTADO DE SÃO PAULO, Vara Cível da Comarca"
    assert scan_names(text) == []


def test_scan_names_dedupes_by_text():
    text = "Contratante: Maria Silva Santos. Assinado por Maria Silva Santos."
    matches = scan_names(text)
    assert len(matches) == 1
    assert matches[0].value == "Maria Silva Santos"
    assert matches[0].source == "contextual"


def test_uppercase_pass_lowercase_connective():
    matches = uppercase_pass("Declaro que MARIA da SILVA assinou.")
    assert [m.value for m in matches] == ["MARIA da SILVA"]


def test_contextual_pass_keeps_whole_last_word():
    matches = contextual_pass("Autor: João Peña, brasileiro.")
    assert [m.value for m in matches] == ["João Peña"]


def test_contextual_pass_stops_at_next_cue():
    matches = contextual_pass("Sr. João Silva e Sra. Ana Costa")
    assert [m.value for m in matches] == ["João Silva", "Ana Costa"]


def test_plural_cue_splits_people():
    text = "Testemunhas: Pedro Alves e Carla Lima."
    matches = contextual_pass(text)
    assert [m.value for m in matches] == ["Pedro Alves", "Carla Lima"]
    for m in matches:
        assert text[m.start:m.end] == m.value


def test_connective_e_inside_one_name():
    matches = mixed_case_pass("assinado por José Pereira e Silva.")
    assert [m.value for m in matches] == ["José Pereira e Silva"]


def test_title_after_e_is_dropped():
    matches = mixed_case_pass("O maestro Ludwig van Beethoven e Dra. Lucia della Rosa")
    assert [m.value for m in matches] == ["Ludwig van Beethoven", "Lucia della Rosa"]


@pytest.mark.parametrize("name", ["Ludwig van Beethoven", "Pedro del Valle", "Lucia della Rosa"])
def test_foreign_connectives(name):
    matches = mixed_case_pass(f"compareceu {name}, estrangeiro.")
    assert [m.value for m in matches] == [name]


# ── Lexicon ──────────────────────────────────────────────────────────

def test_default_lexicon():
    lex = default_lexicon()
    assert lex.is_common_name("Maria")
    assert lex.is_common_name("silva")
    assert lex.is_denied("Tribunal")
    assert lex.is_connective("DA")
    assert not lex.is_denied("da")
    assert default_lexicon() is lex


def test_lexicon_missing_lists():
    with pytest.raises(ConfigError):
        Lexicon.from_dict({"first_names": ["MARIA"]})


def test_lexicon_from_env(tmp_path, monkeypatch):
    data = {
        "version": 99,
        "first_names": ["ZELIA"],
        "last_names": ["QUARESMA"],
        "denylist": ["TRIBUNAL"],
        "document_keywords": ["CONTRATO"],
        "connectives": ["de"],
        "synthetic": {
            "male_first_names": ["Caio"],
            "female_first_names": ["Zelia"],
            "surnames": ["Quaresma"],
            "email_domains": ["exemplo.com"],
            "area_codes": ["11"],
        },
    }
    path = tmp_path / "lexicon.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    monkeypatch.setenv(LEXICON_ENV, str(path))

    lex = load_lexicon()
    assert lex.version == 99
    assert lex.is_common_name("Zelia")
    assert not lex.is_common_name("Maria")
