# Tests for the Tangent blog API.
