import pytest

from testsuites.unit.fakes import FakeNode, FakeWindow, make_host


@pytest.fixture
def host_and_clock():
    return make_host()


@pytest.fixture
def host(host_and_clock):
    return host_and_clock[0]


@pytest.fixture
def clock(host_and_clock):
    return host_and_clock[1]


@pytest.fixture
def browser_window(host) -> FakeWindow:
    """A loaded browser window with a small toolbar document."""
    window = host.windows.add(FakeWindow(title="Browser"))
    window.document.append(
        FakeNode("toolbar", id="nav-bar").append(
            FakeNode("button", id="home-button", classes=("toolbarbutton",)),
            FakeNode("input", id="urlbar", attrs={"name": "location"}, props={"value": ""}),
        ),
        FakeNode("a", id="help", text="Help"),
    )
    return window
