# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest

HEADER = (
    "Personnel_Records.Payroll_Number,Personnel_Records.Forenames,Personnel_Records.Surname,"
    "Personnel_Records.Date_of_Birth,Personnel_Records.Telephone,Personnel_Records.Mobile,"
    "Personnel_Records.Address,Personnel_Records.Address_2,Personnel_Records.Postcode,"
    "Personnel_Records.EMail_Home,Personnel_Records.Start_Date"
)

COOP08_LINE = (
    "COOP08,John,William,26/01/1955,12345678,987654231,12 Foreman road,London,"
    "GU12 6JW,nomadic20@hotmail.co.uk,18/04/2013"
)

# Fixed reference day so age/future-date rules are deterministic
TODAY = date(2024, 6, 15)


def make_line(
    payroll: str = "TEST01",
    forenames: str = "John",
    surname: str = "Doe",
    dob: str = "15/03/1990",
    telephone: str = "12345678",
    mobile: str = "987654321",
    address: str = "123 Test St",
    address_2: str = "London",
    postcode: str = "AB12 3CD",
    email: str = "john.doe@hotmail.co.uk",
    start: str = "01/01/2020",
) -> str:
    return ",".join(
        [payroll, forenames, surname, dob, telephone, mobile, address, address_2, postcode, email, start]
    )


def make_csv(*lines: str, header: str = HEADER) -> bytes:
    return "\n".join([header, *lines]).encode("utf-8")


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
  table: employees
logs_directory: ./logs
preview_limit: 5
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def no_db(monkeypatch) -> None:
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    for var in ("DATABASE_URL", "PGDSN"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(name: str, *lines: str, header: str = HEADER) -> Path:
        path = temp_workdir / "data" / name
        path.write_bytes(make_csv(*lines, header=header))
        return path

    return _write


@pytest.fixture(name="make_line")
def make_line_fixture():
    return make_line


@pytest.fixture(name="make_csv")
def make_csv_fixture():
    return make_csv


@pytest.fixture()
def coop08_csv() -> bytes:
    return make_csv(COOP08_LINE)
