import pytest

from lbsim import LBSimulator
from lbsim.output import ImbalanceWriter, normalize_policy_name


def test_normalize_policy_name():
    assert normalize_policy_name("Round Robin") == "Round_Robin"
    assert normalize_policy_name("Least Request") == "Least_Request"


def test_writer_emits_one_line_per_tick(tmp_path):
    with ImbalanceWriter("Least Request", tmp_path) as writer:
        sim = LBSimulator(3, 4, "Least Request", seed=1, output=writer)
        sim.run(250)

    assert writer.path == tmp_path / "imbalance_Least_Request.txt"
    lines = writer.path.read_text().splitlines()
    assert len(lines) == 250
    assert [int(x) for x in lines] == sim.imbalance_series().tolist()


def test_writer_requires_open(tmp_path):
    writer = ImbalanceWriter("Round Robin", tmp_path)
    with pytest.raises(RuntimeError):
        writer.write_tick(3)
