"""
Tests for keyboard navigation of the selection.
"""
import unittest

from archive_intake.address import Address
from archive_intake.navigation import KeyboardNavigator, navigate, next_address


class TestNextAddress(unittest.TestCase):
    """Test cases for single key moves."""

    def test_arrows_clamp(self):
        """Test arrow keys stop at the grid edges."""
        self.assertEqual(next_address('ArrowUp', Address(0, 0), 3, 3), Address(0, 0))
        self.assertEqual(next_address('ArrowLeft', Address(0, 2), 3, 3), Address(0, 2))
        self.assertEqual(next_address('ArrowDown', Address(1, 3), 3, 3), Address(1, 3))
        self.assertEqual(next_address('ArrowRight', Address(3, 1), 3, 3), Address(3, 1))
        self.assertEqual(next_address('ArrowRight', Address(1, 1), 3, 3), Address(2, 1))

    def test_enter_moves_down(self):
        """Test that Enter behaves like ArrowDown."""
        self.assertEqual(next_address('Enter', Address(2, 0), 3, 3), Address(2, 1))

    def test_tab_wraps(self):
        """Test that Tab wraps to the first column of the next row."""
        self.assertEqual(next_address('Tab', Address(1, 0), 3, 3), Address(2, 0))
        self.assertEqual(next_address('Tab', Address(3, 0), 3, 3), Address(0, 1))
        self.assertEqual(next_address('Tab', Address(3, 3), 3, 3), Address(0, 3))

    def test_other_keys(self):
        """Test that non-navigation keys do not move."""
        self.assertIsNone(next_address('a', Address(0, 0), 3, 3))


class TestNavigate(unittest.TestCase):
    """Test cases for selection updates."""

    def setUp(self):
        """Set up a 3x3 grid."""
        self.data = [["", "", ""], ["", "", ""], ["", "", ""]]

    def test_collapse_on_move(self):
        """Test that a plain move collapses the selection onto the new cell."""
        self.assertEqual(navigate('ArrowDown', ("A1", "B2"), self.data), ("B3", "B3"))

    def test_extend_moves_head(self):
        """Test that extending keeps the anchor and moves the head."""
        selection = navigate('ArrowRight', ("A1", "A1"), self.data, extend=True)
        self.assertEqual(selection, ("A1", "B1"))
        selection = navigate('ArrowDown', selection, self.data, extend=True)
        self.assertEqual(selection, ("A1", "B2"))
        selection = navigate('ArrowLeft', selection, self.data, extend=True)
        self.assertEqual(selection, ("A1", "A2"))

    def test_no_selection(self):
        """Test that nothing happens without a selection."""
        self.assertIsNone(navigate('ArrowDown', None, self.data))

    def test_non_navigation_key(self):
        """Test that other keys leave the selection as is."""
        selection = ("A1", "B2")
        self.assertIs(navigate('x', selection, self.data), selection)

    def test_navigator(self):
        """Test the stateful navigator."""
        navigator = KeyboardNavigator(self.data)
        self.assertIsNone(navigator.handle_key('ArrowDown'))

        navigator.select("C1")
        self.assertEqual(navigator.handle_key('Tab'), ("A2", "A2"))
        self.assertEqual(navigator.handle_key('ArrowRight', extend=True), ("A2", "B2"))

        navigator.set_data([["", ""], ["", ""]])
        self.assertEqual(navigator.handle_key('ArrowDown'), ("B2", "B2"))


if __name__ == '__main__':
    unittest.main()
