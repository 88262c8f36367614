"""Pytest fixtures for nlp-corpora tests.

Fixture corpora are written to a temporary directory per test: plain
files, zip archives and zip archives nested inside zip archives.
"""

import bz2
import io
import zipfile

import pytest
from pathlib import Path


TREEBANK_SAMPLE = """\
( (S
    (NP-SBJ (NNP Pierre) (NNP Vinken) )
    (VP (MD will)
      (VP (VB join)
        (NP (DT the) (NN board) )))
    (. .) ))
( (S
    (NP-SBJ (NNP Mr.) (NNP Vinken) )
    (VP (VBZ is)
      (NP-PRD (NN chairman) ))
    (. .) ))
"""

BROWN_SAMPLE = """\

\tThe/at Fulton/np-tl County/nn-tl Grand/jj-tl Jury/nn-tl said/vbd Friday/nr ./.

\tThe/at jury/nn further/rbr said/vbd ./.
"""

CHAT_SAMPLE = b"""\
<?xml version="1.0" encoding="UTF-8"?>
<Session>
  <Posts>
    <Post class="Emotion" user="U1">hi<terminals><t pos="UH" word="hi"/></terminals></Post>
    <Post class="Statement" user="U2">i am here<terminals><t pos="PRP" word="i"/><t pos="VBP" word="am"/><t pos="RB" word="here"/></terminals></Post>
    <Post class="Emotion" user="U1">lol<terminals><t pos="UH" word="lol"/></terminals></Post>
  </Posts>
</Session>
"""

NEWSITEM_TEMPLATE = """\
<?xml version="1.0" encoding="iso-8859-1" ?>
<newsitem itemid="{itemid}" id="root" date="{date}" xml:lang="en">
<title>MEXICO: {headline}</title>
<headline>{headline}</headline>
<byline>Henry Tricks</byline>
<dateline>MEXICO CITY</dateline>
<text>
<p>{first}</p>
<p>Stocks rallied for the second straight day.</p>
</text>
<copyright>(c) Reuters Limited 1996</copyright>
<metadata>
<codes class="bip:countries:1.0">
  <code code="MEX">
    <editdetail attribution="Reuters BIP Coding Group" action="confirmed" date="{date}"/>
  </code>
</codes>
<codes class="bip:topics:1.0">
  <code code="{topic}"/>
  <code code="M11"/>
</codes>
</metadata>
</newsitem>
"""

WIKI_SAMPLE = b"""\
<mediawiki xmlns="http://www.mediawiki.org/xml/export-0.10/" version="0.10" xml:lang="en">
  <siteinfo><sitename>Wikipedia</sitename></siteinfo>
  <page>
    <title>Anarchism</title>
    <ns>0</ns>
    <id>12</id>
    <revision>
      <id>1001</id>
      <contributor><username>Someone</username><id>77</id></contributor>
      <text xml:space="preserve">'''Anarchism''' is a [[political philosophy]].</text>
    </revision>
  </page>
  <page>
    <title>AccessibleComputing</title>
    <ns>0</ns>
    <id>10</id>
    <redirect title="Computer accessibility" />
    <revision>
      <id>1002</id>
      <text xml:space="preserve">#REDIRECT [[Computer accessibility]]</text>
    </revision>
  </page>
</mediawiki>
"""


def newsitem(itemid: str, headline: str, topic: str, date: str = "1996-08-20") -> bytes:
    """Render a NewsML story."""
    first = f"Story {itemid}: evidence that the economy was back on track sent markets into a buzz."
    return NEWSITEM_TEMPLATE.format(
        itemid=itemid, date=date, headline=headline, topic=topic, first=first
    ).encode("iso-8859-1")


def make_zip(members: dict[str, bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Build a zip archive in memory, members in insertion order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for name, data in members.items():
            if name.endswith("/"):
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def treebank_dir(tmp_path) -> Path:
    """Treebank corpus: one section directory with one file."""
    root = tmp_path / "treebank"
    section = root / "00"
    section.mkdir(parents=True)
    (section / "wsj_0001.mrg").write_text(TREEBANK_SAMPLE, encoding="utf-8")
    return root


@pytest.fixture
def brown_dir(tmp_path) -> Path:
    """Brown corpus with two categories and a non-corpus file."""
    root = tmp_path / "brown"
    root.mkdir()
    (root / "ca01").write_text(BROWN_SAMPLE, encoding="utf-8")
    (root / "cb02").write_text("\tA/at vote/nn ./.\n", encoding="utf-8")
    (root / "README").write_text("Brown corpus readme", encoding="utf-8")
    return root


@pytest.fixture
def chat_dir(tmp_path) -> Path:
    """NPS Chat corpus with one session file."""
    root = tmp_path / "nps_chat"
    root.mkdir()
    (root / "10-19-20s_706posts.xml").write_bytes(CHAT_SAMPLE)
    return root


@pytest.fixture
def plaintext_dir(tmp_path) -> Path:
    """Plaintext corpus with one text file, one empty file and a non-text file."""
    root = tmp_path / "plaintext"
    root.mkdir()
    (root / "moby.txt").write_text("  Call me Ishmael. Some years ago...\n", encoding="utf-8")
    (root / "empty.txt").write_text("   \n", encoding="utf-8")
    (root / "notes.md").write_text("# not a corpus file", encoding="utf-8")
    return root


@pytest.fixture
def daily_archives() -> dict[str, bytes]:
    """Two daily RCV1 archives (the second with a directory marker)."""
    return {
        "19960820.zip": make_zip({
            "2286newsML.xml": newsitem("2286", "Recovery excitement brings Mexican markets to life.", "E11"),
            "2287newsML.xml": newsitem("2287", "Peso firms against dollar.", "C15"),
        }),
        "19960821.zip": make_zip({
            "dtd/": b"",
            "2301newsML.xml": newsitem("2301", "Mexican stocks end higher.", "C15", date="1996-08-21"),
        }),
    }


@pytest.fixture
def reuters_zip(tmp_path, daily_archives) -> Path:
    """Outer RCV1 archive holding the daily archives, stored uncompressed."""
    path = tmp_path / "rcv1.zip"
    path.write_bytes(make_zip(daily_archives, compression=zipfile.ZIP_STORED))
    return path


@pytest.fixture
def broken_reuters_zip(tmp_path, daily_archives) -> Path:
    """Outer archive whose middle member is not an archive."""
    members = {
        "19960820.zip": daily_archives["19960820.zip"],
        "19960820b.zip": b"this blob has no directory trailer",
        "19960821.zip": daily_archives["19960821.zip"],
    }
    path = tmp_path / "rcv1-broken.zip"
    path.write_bytes(make_zip(members))
    return path


@pytest.fixture
def wiki_dump(tmp_path) -> Path:
    """Compressed MediaWiki dump with one article and one redirect."""
    path = tmp_path / "enwiki-pages-articles.xml.bz2"
    path.write_bytes(bz2.compress(WIKI_SAMPLE))
    return path
