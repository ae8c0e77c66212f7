"""
符号链接验证模块测试
"""
from flattenf.core.models import VerifyStatus
from flattenf.core.verifier import classify, verify


def test_resolved_symlink(tmp_path):
    target = tmp_path / "nvim"
    target.mkdir()
    link = tmp_path / "link"
    link.symlink_to(target)

    entry = classify(link)

    assert entry.status == VerifyStatus.RESOLVED_SYMLINK
    assert entry.link_target == str(target)


def test_broken_symlink(tmp_path):
    link = tmp_path / "link"
    link.symlink_to(tmp_path / "gone")

    assert classify(link).status == VerifyStatus.BROKEN_SYMLINK


def test_plain_file_is_direct_entry(tmp_path):
    path = tmp_path / ".zshrc"
    path.write_text("")

    assert classify(path).status == VerifyStatus.DIRECT_ENTRY


def test_missing(tmp_path):
    assert classify(tmp_path / "nothing").status == VerifyStatus.MISSING


def test_link_through_proxy_chain(tmp_path):
    """~/.config/nvim -> dotfiles/nvim/.config/nvim -> .. 仍然可以解析"""
    pkg = tmp_path / "dotfiles" / "nvim"
    (pkg / ".config").mkdir(parents=True)
    (pkg / "init.lua").write_text("")
    (pkg / ".config" / "nvim").symlink_to("..")
    link = tmp_path / "home-nvim"
    link.symlink_to(pkg / ".config" / "nvim")

    assert classify(link).status == VerifyStatus.RESOLVED_SYMLINK
    assert (link / "init.lua").exists()


def test_report_counts(tmp_path):
    good = tmp_path / "good"
    good.symlink_to(tmp_path)
    bad = tmp_path / "bad"
    bad.symlink_to(tmp_path / "missing")
    plain = tmp_path / "plain"
    plain.write_text("")

    report = verify([good, bad, plain, tmp_path / "absent"])

    assert report.resolved == 1
    assert report.broken == 1
    assert report.direct == 1
    assert report.missing == 1
    assert not report.success


def test_success_ignores_direct_and_missing(tmp_path):
    plain = tmp_path / "plain"
    plain.write_text("")

    report = verify([plain, tmp_path / "absent"])

    assert report.success


def test_expands_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    (tmp_path / ".zshrc").write_text("")

    report = verify(["~/.zshrc"])

    assert report.entries[0].path == tmp_path / ".zshrc"
    assert report.entries[0].status == VerifyStatus.DIRECT_ENTRY
