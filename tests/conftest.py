"""Shared test fixtures for TagValidator."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from tagvalidator.service.engine import ValidationEngine
from tagvalidator.service.jobs import JobManager


@pytest.fixture
def engine() -> ValidationEngine:
    return ValidationEngine()


@pytest.fixture
def job_manager(engine: ValidationEngine) -> Iterator[JobManager]:
    """JobManager with long TTL and no cleanup thread (for tests)."""
    mgr = JobManager(engine=engine, ttl_seconds=3600, cleanup_interval=9999, max_workers=2)
    yield mgr
    mgr.stop()


VALID_HTML = """\
<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Orders</title>
    <style>
      p > span { color: red; }
    </style>
  </head>
  <body>
    <!-- navigation </nav> is commented out -->
    <div class="wrapper" data-template="</section>">
      <img src="logo.png" alt="logo"><br>
      <p>Total: <span>42</span></p>
      <input type="text" />
    </div>
    <script>
      document.write("</div>");
    </script>
  </body>
</html>
"""

BROKEN_HTML = """\
<html>
  <body>
    <div class="card">
      <p>First <span>paragraph</p>
    </div>
  </section>
  </body>
"""

VALID_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<catalog>
  <book id="b1">
    <title>Markup</title>
    <note><![CDATA[ use </title> to end a title ]]></note>
    <cover/>
  </book>
</catalog>
"""
