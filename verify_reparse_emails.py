import json

import reparse_emails


TABLE_HTML = (
    "<table><tr><th>P/N</th><th>Description</th><th>Qty</th></tr>"
    "<tr><td>123-456</td><td>GASKET</td><td>2</td></tr></table>"
)


def test_reparse_writes_results_and_counts(tmp_path, capsys) -> None:
    (tmp_path / "a.json").write_text(
        json.dumps({"fromEmail": "buyer@unknown-mro.net", "subject": "RFQ", "bodyHtml": TABLE_HTML}),
        encoding="utf-8",
    )
    (tmp_path / "b.json").write_text("[1, 2]", encoding="utf-8")

    exit_code = reparse_emails.main([str(tmp_path), "--write"])

    assert exit_code == 2
    parsed = json.loads((tmp_path / "a.parsed.json").read_text(encoding="utf-8"))
    assert [order["part_number"] for order in parsed["orders"]] == ["123-456"]
    output = capsys.readouterr().out
    assert "[parsed] a.json: airline=- strategy=generic_table orders=1 aviation=true" in output
    assert "[error] b.json: not a JSON object" in output
    assert "scanned=2 filtered=0 parsed=1 with_orders=1 changed=1 written=1 errors=1 write=True" in output

    # a second run sees identical output and writes nothing
    (tmp_path / "b.json").unlink()
    assert reparse_emails.main([str(tmp_path), "--write"]) == 0
    assert "changed=0 written=0 errors=0" in capsys.readouterr().out
    print("SUCCESS: stored payloads are reparsed and unchanged results are skipped.")


def test_only_id_filters_payloads(tmp_path, capsys) -> None:
    for name in ("keep", "skip"):
        (tmp_path / f"{name}.json").write_text(
            json.dumps({"fromEmail": "x@y.org", "subject": "RFQ", "body": "hello"}), encoding="utf-8"
        )
    assert reparse_emails.main([str(tmp_path), "--only-id", "keep"]) == 0
    output = capsys.readouterr().out
    assert "scanned=2 filtered=1 parsed=1" in output
    assert not (tmp_path / "keep.parsed.json").exists()
