import pytest

from fare_prediction.data.features import CategoricalEncoder
from fare_prediction.data.schema import CSV_COLUMNS, TravelRecord

HEADER = ",".join(CSV_COLUMNS)

TRAIN_ROWS = [
    "18/12/2019,ZQN,9:35 AM,WLG,6:10 PM,8h 35m,(1 stop),5h 35m in AKL,,Air New Zealand,422",
    "18/12/2019,ZQN,10:20 AM,WLG,6:40 PM,8h 20m,(1 stop),5h 20m in AKL,,Air New Zealand,422",
    "18/12/2019,AKL,7:00 AM,WLG,8:05 AM,1h 5m,(Direct),,,Air New Zealand,159",
    "18/12/2019,AKL,12:30 PM,CHC,1:55 PM,1h 25m,(Direct),,,Jetstar,98",
    "19/12/2019,WLG,6:00 AM,AKL,7:05 AM,1h 5m,(Direct),,,Jetstar,74",
    "19/12/2019,CHC,3:15 PM,AKL,4:40 PM,1h 25m,(Direct),,,Air New Zealand,189",
    "19/12/2019,ZQN,11:00 AM,AKL,12:50 PM,1h 50m,(Direct),,,Jetstar,135",
    "20/12/2019,WLG,5:45 PM,ZQN,9:10 PM,3h 25m,(1 stop),1h 10m in CHC,,Air New Zealand,366",
]

TEST_ROWS = [
    "21/12/2019,ZQN,10:20 AM,WLG,6:10 PM,7h 50m,(1 stop),4h 50m in AKL,,Air New Zealand,422",
    "21/12/2019,AKL,7:30 AM,CHC,8:55 AM,1h 25m,(Direct),,,Jetstar,102",
    "21/12/2019,NSN,9:00 AM,AKL,10:10 AM,1h 10m,(Direct),,,Sounds Air,210",
]


def write_csv(path, rows, header=HEADER):
    """Writes a header line followed by the given raw rows."""
    lines = [header] + list(rows) if header is not None else list(rows)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def make_record(**overrides) -> TravelRecord:
    fields = dict(
        travel_date="18/12/2019",
        departure_airport="ZQN",
        departure_time="10:20 AM",
        arrival_airport="WLG",
        arrival_time="6:10 PM",
        duration="7h 50m",
        direct="(1 stop)",
        transit="4h 50m in AKL",
        baggage="",
        airline="Air New Zealand",
        fare=422,
    )
    fields.update(overrides)
    return TravelRecord(**fields)


@pytest.fixture
def train_csv(tmp_path):
    return write_csv(tmp_path / "train.csv", TRAIN_ROWS)


@pytest.fixture
def test_csv(tmp_path):
    return write_csv(tmp_path / "test.csv", TEST_ROWS)


@pytest.fixture
def train_records():
    return [TravelRecord.from_row(row.split(",")) for row in TRAIN_ROWS]


@pytest.fixture
def test_records():
    return [TravelRecord.from_row(row.split(",")) for row in TEST_ROWS]


@pytest.fixture
def fitted_encoder(train_records):
    return CategoricalEncoder().fit(train_records, ["departure_airport", "arrival_airport", "airline"])
