from __future__ import annotations

from polars.testing import assert_frame_equal

from pydiverse.map2d import Map2d, Polars


def assert_equal(left, right, check_dtypes=False, check_row_order=False):
    left_df = left.export(Polars()) if isinstance(left, Map2d) else left
    right_df = right.export(Polars()) if isinstance(right, Map2d) else right

    try:
        assert_frame_equal(
            left_df,
            right_df,
            check_column_order=False,
            check_row_order=check_row_order,
            check_dtypes=check_dtypes,
        )
    except AssertionError as e:
        print("First dataframe:")
        print(left_df)
        print()
        print("Second dataframe:")
        print(right_df)
        raise e
