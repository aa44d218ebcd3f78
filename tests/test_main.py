import numpy as np
import pytest

from bucket_kdtree.main import brute_force_nearest_distance, main


class TestMain:
    def test_random_query(self, capsys):
        assert main(["-n", "200", "-d", "3", "-s", "1"]) == 0

        out = capsys.readouterr().out
        assert "Nearest point:" in out
        assert "Brute force distance:" in out

    def test_given_query(self, capsys):
        assert main(["-n", "50", "-q", "0.5", "0.5", "--min_bucket_size", "1"]) == 0
        assert "Query point: [0.5, 0.5]" in capsys.readouterr().out

    def test_plot_needs_2d_points(self, capsys):
        assert main(["-n", "20", "-d", "3", "--plot"]) == 0
        assert "Only 2 dimensional points can be shown" in capsys.readouterr().out

    def test_empty_points(self, capsys):
        assert main(["-n", "0"]) == 1
        assert "Points list cannot be empty" in capsys.readouterr().out

    def test_query_dimension_mismatch(self, capsys):
        assert main(["-n", "10", "-q", "0.5"]) == 1
        assert "Query point has 1 dimensions" in capsys.readouterr().out

    def test_negative_num_points(self, capsys):
        with pytest.raises(SystemExit) as e:
            main(["-n", "-1"])
        assert e.value.code == 2
        assert "--num_points must be >= 0" in capsys.readouterr().err

    def test_invalid_option(self):
        with pytest.raises(SystemExit):
            main(["--num_points", "many"])


def test_brute_force_nearest_distance():
    points = np.array([[0.0, 0.0], [3.0, 4.0]])
    assert brute_force_nearest_distance(points, np.array([3.0, 5.0])) == 1.0
