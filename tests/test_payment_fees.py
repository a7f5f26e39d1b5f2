from pathlib import Path

from src.services.payment_fees import load_payment_fees

DEFAULT_TABLE = Path(__file__).resolve().parents[1] / "knowledge" / "catalogs" / "payment_fees.yaml"


def test_fees_dict_layout(tmp_path):
    p = tmp_path / "fees.yaml"
    p.write_text(
        "fees:\n"
        "  - {payment_method: PIX, installments: 1, applied_fee: 0}\n"
        "  - {payment_method: credit, installments: 3, applied_fee: 6.5}\n",
        encoding="utf-8",
    )
    fees = load_payment_fees(p)
    assert [(f.payment_method, f.installments, f.applied_fee) for f in fees] == [
        ("pix", 1, 0.0),
        ("credit", 3, 6.5),
    ]


def test_fees_list_layout_skips_bad_rows(tmp_path):
    p = tmp_path / "fees.yaml"
    p.write_text(
        "- {payment_method: credit, installments: 2, applied_fee: 5}\n"
        "- {installments: 3, applied_fee: 1}\n"
        "- {payment_method: credit, installments: dois, applied_fee: 1}\n"
        "- just text\n",
        encoding="utf-8",
    )
    fees = load_payment_fees(p)
    assert [(f.payment_method, f.installments) for f in fees] == [("credit", 2)]


def test_missing_or_broken_file_gives_no_fees(tmp_path):
    assert load_payment_fees(tmp_path / "nope.yaml") == []

    broken = tmp_path / "broken.yaml"
    broken.write_text("fees: [unclosed", encoding="utf-8")
    assert load_payment_fees(broken) == []


def test_default_table_ships_credit_plans():
    fees = load_payment_fees(DEFAULT_TABLE)
    credit = sorted(f.installments for f in fees if f.payment_method == "credit")
    assert credit == list(range(1, 13))
