"""
End-to-end tests for the redirect-generator CLI.

The CLI runs in-process through `main(argv, storage=..., resolver=..., clock=...)`
with the in-memory storage fixture, so every invocation can be inspected
afterwards.
"""

import io

import pytest

from redirect_generator.cli import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, main, render_table


def run(argv, storage, resolver=None, clock=None):
    out, err = io.StringIO(), io.StringIO()
    code = main(argv, storage=storage, resolver=resolver, clock=clock, out=out, err=err)
    return code, out.getvalue(), err.getvalue()


def test_add_creates_redirect_and_prints_summary(storage, resolver, clock):
    code, out, err = run(["redirect:add", "/old", "/de/ueber-uns", "--status-code", "301"], storage, resolver, clock)

    assert code == EXIT_OK
    assert "Redirect has been added!" in out
    assert "Status Code" in out and "301" in out
    assert "Target Page" in out and "12" in out
    assert "German (ID 1)" in out
    assert "https://www.example.com/de/ueber-uns" in out
    assert err == ""
    rows = storage.select_all()
    assert len(rows) == 1
    assert rows[0]["target"] == "https://www.example.com/de/ueber-uns"
    assert rows[0]["status_code"] == 301
    assert rows[0]["created_at"] == clock.now


def test_status_alias_and_default(storage, resolver):
    assert run(["redirect:add", "/a", "12", "--status", "302"], storage, resolver)[0] == EXIT_OK
    assert run(["redirect:add", "/b", "12"], storage, resolver)[0] == EXIT_OK
    codes = {r["source_path"]: r["status_code"] for r in storage.select_all()}
    assert codes == {"/a": 302, "/b": 307}


def test_dry_run_is_labelled_and_writes_nothing(storage, resolver):
    code, out, _ = run(["redirect:add", "/old", "12", "--dry-run"], storage, resolver)
    assert code == EXIT_OK
    assert "Dry run enabled!" in out
    assert "would have been added" in out
    assert storage.select_all() == []


def test_same_target_is_reported_as_noop(storage, resolver):
    run(["redirect:add", "/old", "12"], storage, resolver)
    code, out, _ = run(["redirect:add", "/old", "12"], storage, resolver)
    assert code == EXIT_OK
    assert "[NOTE]" in out
    assert "same target" in out
    assert len(storage.select_all()) == 1


def test_conflict_is_rejected_with_non_zero_exit(storage, resolver):
    run(["redirect:add", "/old", "12"], storage, resolver)
    code, out, err = run(["redirect:add", "/old", "15"], storage, resolver)
    assert code == EXIT_FAILURE
    assert "[ERROR]" in err
    assert "exists already" in err
    assert "overwritten" not in out
    assert storage.select_all()[0]["target"] == "https://www.example.com/about"


def test_overwrite_existing(storage, resolver):
    run(["redirect:add", "/old", "12"], storage, resolver)
    code, out, _ = run(["redirect:add", "/old", "15", "--overwrite-existing"], storage, resolver)
    assert code == EXIT_OK
    assert "Redirect has been overwritten!" in out
    rows = storage.select_all()
    assert len(rows) == 1
    assert rows[0]["target"] == "https://www.example.com/contact"


def test_overwrite_dry_run(storage, resolver):
    run(["redirect:add", "/old", "12"], storage, resolver)
    code, out, _ = run(["redirect:add", "/old", "15", "--overwrite-existing", "--dry-run"], storage, resolver)
    assert code == EXIT_OK
    assert "would overwrite" in out
    assert storage.select_all()[0]["target"] == "https://www.example.com/about"


def test_flags_are_passed_through(storage, resolver):
    run(
        ["redirect:add", "/old", "12", "--force-https", "--keep-query-parameters",
         "--respect-query-parameters", "--disable-hitcount", "--regexp"],
        storage, resolver,
    )
    row = storage.select_all()[0]
    assert row["force_https"] and row["keep_query_parameters"] and row["respect_query_parameters"]
    assert row["disable_hitcount"] and row["is_regexp"]


@pytest.mark.parametrize("status", ["200", "308", "404"])
def test_invalid_status_code_is_usage_error(storage, resolver, status):
    code, _, err = run(["redirect:add", "/old", "12", "--status-code", status], storage, resolver)
    assert code == EXIT_USAGE
    assert "not allowed" in err
    assert storage.select_all() == []


def test_unresolvable_target_fails(storage, resolver):
    code, _, err = run(["redirect:add", "/old", "/nope"], storage, resolver)
    assert code == EXIT_FAILURE
    assert "Following error occurred" in err
    assert "1568487003" in err
    assert storage.select_all() == []


def test_non_ascii_digit_target_fails(storage, resolver):
    code, _, err = run(["redirect:add", "/old", "²"], storage, resolver)
    assert code == EXIT_FAILURE
    assert "1568487003" in err
    assert "ValueError" not in err


def test_invalid_source_fails(storage, resolver):
    code, _, err = run(["redirect:add", "/with space", "12"], storage, resolver)
    assert code == EXIT_FAILURE
    assert "1568487001" in err


def test_missing_positional_is_argparse_error(storage, resolver):
    with pytest.raises(SystemExit) as exc:
        run(["redirect:add", "/old"], storage, resolver)
    assert exc.value.code == 2


def test_site_config_file_is_used(storage, site_config):
    code, out, _ = run(["redirect:add", "/old", "12", "--site-config", str(site_config)], storage)
    assert code == EXIT_OK
    assert storage.select_all()[0]["target"] == "https://www.example.com/about"


def test_missing_site_config(storage, tmp_path):
    code, _, err = run(["redirect:add", "/old", "12", "--site-config", ""], storage)
    assert code == EXIT_USAGE
    assert "No site map configured" in err

    code, _, err = run(["redirect:add", "/old", "12", "--site-config", str(tmp_path / "nope.json")], storage)
    assert code == EXIT_FAILURE
    assert "Could not load site map" in err


def test_list(storage, resolver):
    code, out, _ = run(["redirect:list"], storage)
    assert code == EXIT_OK
    assert "No redirects stored." in out

    run(["redirect:add", "/old", "12"], storage, resolver)
    run(["redirect:add", "https://shop.example.com/x?y=1", "15"], storage, resolver)
    code, out, _ = run(["redirect:list"], storage)
    assert code == EXIT_OK
    assert "/old" in out
    assert "shop.example.com" in out and "/x?y=1" in out
    assert "https://www.example.com/contact" in out


def test_render_table_aligns_columns():
    table = render_table([["a", "bbb"], ["cc", None]], headers=["H1", "H2"])
    lines = table.splitlines()
    assert lines[0] == lines[2] == lines[-1]
    assert lines[1].startswith("  H1 ")
    assert len({len(line) for line in (lines[0], lines[2])}) == 1
    assert render_table([]) == ""
