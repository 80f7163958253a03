from generic_services import StatusGeneric, StatusGenericWithResult, ValidationResult


class TestStatusGeneric:
    def test_new_status_is_valid(self):
        status = StatusGeneric()

        assert status.is_valid
        assert not status.has_errors
        assert status.message == "Success"
        assert status.get_all_errors() is None

    def test_set_message_shown_while_valid(self):
        status = StatusGeneric()
        status.message = "Successfully updated the Book"

        assert status.message == "Successfully updated the Book"

    def test_errors_replace_message(self):
        status = StatusGeneric()
        status.message = "Successfully updated the Book"
        status.add_error("first").add_error("second")

        assert not status.is_valid
        assert status.message == "Failed with 2 errors"
        assert status.get_all_errors(", ") == "first, second"

    def test_single_error_message(self):
        status = StatusGeneric().add_error("only one")

        assert status.message == "Failed with 1 error"

    def test_add_error_keeps_member_names(self):
        status = StatusGeneric().add_error("bad stars", "num_stars")

        assert status.errors[0] == ValidationResult("bad stars", ("num_stars",))

    def test_header_prefixes_errors(self):
        status = StatusGeneric(header="Book").add_error("no title")

        assert str(status.errors[0]) == "Book: no title"

    def test_combine_errors(self):
        status = StatusGeneric()
        other = StatusGeneric().add_error("from entity")

        status.combine_errors(other)
        status.combine_errors(None)

        assert [str(e) for e in status.errors] == ["from entity"]


class TestStatusGenericWithResult:
    def test_result_returned_when_valid(self):
        status = StatusGenericWithResult().set_result(42)

        assert status.result == 42

    def test_result_hidden_when_errors(self):
        status = StatusGenericWithResult().set_result(42)
        status.add_error("broken")

        assert status.result is None
