from __future__ import annotations

import codecs

from norrsken.sie import decode_sie_bytes, detect_encoding, encode_sie_text, read_sie_file


def test_detect_encoding_prefers_utf8_bom() -> None:
    assert detect_encoding(codecs.BOM_UTF8 + b"#FLAGGA 0") == "utf-8-sig"


def test_detect_encoding_honours_pcutf8_declaration() -> None:
    data = "#FORMAT PCUTF8\n#FNAMN \"Åkeri AB\"\n".encode("utf-8")

    assert detect_encoding(data) == "utf-8"
    assert "Åkeri AB" in decode_sie_bytes(data)


def test_detect_encoding_recognizes_latin1() -> None:
    data = '#FNAMN "Häst och vagn"'.encode("iso-8859-1")

    assert detect_encoding(data) == "iso-8859-1"


def test_detect_encoding_defaults_to_cp437() -> None:
    data = '#FORMAT PC8\n#FNAMN "Häst och vagn"'.encode("cp437")

    assert detect_encoding(data) == "cp437"
    assert decode_sie_bytes(data).endswith('"Häst och vagn"')


def test_encode_sie_text_follows_format() -> None:
    assert encode_sie_text("ö", "PC8") == "ö".encode("cp437")
    assert encode_sie_text("ö", "pcutf8") == "ö".encode("utf-8")


def test_read_sie_file_decodes_from_disk(tmp_path) -> None:
    path = tmp_path / "bokslut.se"
    path.write_bytes('#FORMAT PC8\n#KONTO 1930 "Företagskonto"\n'.encode("cp437"))

    assert "Företagskonto" in read_sie_file(path)
