from unittest import TestCase, mock

from esmonitor.utils import console


@mock.patch("builtins.print")
class ConsoleTests(TestCase):
    def tearDown(self):
        console.init(quiet=False)

    def test_prints_with_prefix(self, print_mock):
        console.init(quiet=False)

        console.info("Published [3] measures.")

        self.assertEqual("[INFO] Published [3] measures.", print_mock.call_args[0][0])

    def test_quiet_mode_suppresses_regular_output(self, print_mock):
        console.init(quiet=True)

        console.println("table")
        console.info("Stopping.")

        print_mock.assert_not_called()

    def test_errors_are_shown_in_quiet_mode(self, print_mock):
        console.init(quiet=True)

        console.error("Cannot poll.")

        self.assertEqual("[ERROR] Cannot poll.", print_mock.call_args[0][0])
