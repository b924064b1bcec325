import os
import sys
from datetime import datetime, timezone

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


@pytest.fixture()
def t0():
    return datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def t1():
    return datetime(2025, 3, 2, 12, 0, 0, tzinfo=timezone.utc)


LISTING_HTML = """
<html><body>
<ul id="textlist">
  <li data-cnt="1"><a href="/texte/zebra.html">  Zebra
      Geschichte </a><div class="punkte">12 Punkte</div></li>
  <li data-cnt="2" class="pt-7"><a href="https://other.example/abc">apfel</a></li>
  <li data-cnt="3"><span>kein Link</span><div class="punkte">99</div></li>
  <li data-cnt="4"><a href="mitte.html">Mitte</a> (3 Punkte)</li>
</ul>
</body></html>
"""


@pytest.fixture()
def listing_html():
    return LISTING_HTML
