import logging
import unittest

from dashconform.event_bus import EventBus

class TestEventBus(unittest.TestCase):
    def setUp(self) -> None:
        self.bus = EventBus(['one', 'two'], logging.getLogger('DashValidator'))
        self.calls = []

    def listener(self, name: str, payload) -> None:
        self.calls.append((name, payload))

    def test_trigger_in_registration_order(self) -> None:
        order = []
        self.bus.on('one', lambda n, p: order.append('a'))
        self.bus.on('one', lambda n, p: order.append('b'))
        self.assertEqual(self.bus.trigger('one', None), 2)
        self.assertEqual(order, ['a', 'b'])

    def test_payload(self) -> None:
        self.bus.on('two', self.listener)
        self.bus.trigger('two', {'value': 42})
        self.bus.trigger('one', {'value': 1})
        self.assertEqual(self.calls, [('two', {'value': 42})])

    def test_unknown_event(self) -> None:
        self.assertFalse(self.bus.on('three', self.listener))
        self.assertEqual(self.bus.trigger('three', None), 0)
        self.assertEqual(self.calls, [])

    def test_off(self) -> None:
        self.bus.on('one', self.listener)
        self.bus.off('one', self.listener)
        self.bus.off('two', self.listener)
        self.assertEqual(self.bus.trigger('one', None), 0)

    def test_listener_exception(self) -> None:
        def broken(name, payload):
            raise RuntimeError('boom')

        self.bus.on('one', broken)
        self.bus.on('one', self.listener)
        with self.assertLogs('DashValidator', level=logging.ERROR):
            self.assertEqual(self.bus.trigger('one', 1), 2)
        self.assertEqual(self.calls, [('one', 1)])


if __name__ == "__main__":
    unittest.main()
