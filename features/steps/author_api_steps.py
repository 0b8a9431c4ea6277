# Registers the OpenLibrary author API steps with behave.
from openlib_apitest.openlib_behave import steps  # noqa: F401
