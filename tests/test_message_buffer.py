import pytest

from devpilot.utils.message_buffer import MessageBuffer


def test_buffer_file_exists_only_inside_block():
    with MessageBuffer() as buffer:
        path = buffer.path
        assert path.exists()
        buffer.write("feat: thing\n\nbody\n")
        assert buffer.read() == "feat: thing\n\nbody\n"
    assert not path.exists()


def test_buffer_removed_when_block_raises():
    with pytest.raises(KeyError):
        with MessageBuffer() as buffer:
            path = buffer.path
            raise KeyError("boom")
    assert not path.exists()


def test_buffer_tolerates_file_already_gone():
    with MessageBuffer() as buffer:
        buffer.path.unlink()


@pytest.mark.parametrize("text, blank", [
    ("", True),
    ("  \n\t\n", True),
    ("fix: x", False),
])
def test_is_blank(text, blank):
    with MessageBuffer() as buffer:
        buffer.write(text)
        assert buffer.is_blank() is blank


def test_use_outside_block_is_an_error():
    with pytest.raises(RuntimeError):
        MessageBuffer().read()
