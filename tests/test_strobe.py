import pytest

from whistlefinder.system.errors import ResourceUnavailable
from whistlefinder.system.strobe import SimulatedStrobe, SysfsStrobe


def make_led(root, name="torch", max_brightness="255"):
    led = root / name
    led.mkdir()
    (led / "brightness").write_text("0")
    (led / "max_brightness").write_text(max_brightness)
    return led


def test_simulated_strobe_on_off():
    strobe = SimulatedStrobe()
    strobe.set_on(0.5)
    assert strobe.is_on
    strobe.set_off()
    assert strobe.history == [("on", 0.5), ("off", 0.0)]


def test_simulated_strobe_without_hardware():
    with pytest.raises(ResourceUnavailable):
        SimulatedStrobe(available=False).set_on()


def test_sysfs_strobe_scales_brightness(tmp_path):
    led = make_led(tmp_path)
    strobe = SysfsStrobe("torch", root=tmp_path)
    assert strobe.available
    strobe.set_on(1.0)
    assert (led / "brightness").read_text() == "255"
    strobe.set_on(0.5)
    assert (led / "brightness").read_text() == "128"
    strobe.set_off()
    assert (led / "brightness").read_text() == "0"


def test_sysfs_strobe_missing_led(tmp_path):
    strobe = SysfsStrobe("absent", root=tmp_path)
    assert not strobe.available
    with pytest.raises(ResourceUnavailable):
        strobe.set_on()
