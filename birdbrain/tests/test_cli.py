"""
Tests for the birdbrain command.
"""
from birdbrain.cli import build_parser, main


class TestCommand:
    """Tests for the command line entry point."""

    def test_defaults(self):
        """Test the parser defaults."""
        args = build_parser().parse_args([])

        assert args.generations == 20
        assert args.population == 100
        assert args.shape == '5,10,2'
        assert args.partner == 'best'

    def test_run(self, capsys):
        """Test a short run prints the summary."""
        code = main([
            '--generations', '2',
            '--population', '10',
            '--max-ticks', '30',
            '--seed', '3',
        ])

        assert code == 0
        out = capsys.readouterr().out
        assert "EVOLUTION SUMMARY" in out
        assert "Total generations: 2" in out

    def test_plot(self, tmp_path):
        """Test saving the fitness plot."""
        path = tmp_path / 'fitness.png'

        code = main([
            '--generations', '1',
            '--population', '6',
            '--max-ticks', '10',
            '--seed', '1',
            '--partner', 'random',
            '--plot', str(path),
        ])

        assert code == 0
        assert path.exists()

    def test_invalid_shape(self):
        """Test that a malformed shape fails cleanly."""
        assert main(['--shape', '5,x,2']) == 2

    def test_shape_without_sensors(self):
        """Test that a shape too small for the sensors fails cleanly."""
        assert main(['--shape', '2,3,2', '--population', '4']) == 2

    def test_invalid_fractions(self):
        """Test that fractions over 1 fail cleanly."""
        assert main(['--elite-fraction', '0.7', '--offspring-fraction', '0.7']) == 2
