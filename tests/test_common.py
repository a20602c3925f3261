from dairyflow.screens.common import reset_on_change


def test_selection_change_clears_dependents():
    state = {}
    assert reset_on_change("sales_selection", (1, "2024-05-01"), ("sales_create_seller",), state)

    state["sales_create_seller"] = {"id": 9}
    assert not reset_on_change("sales_selection", (1, "2024-05-01"), ("sales_create_seller",), state)
    assert state["sales_create_seller"] == {"id": 9}

    assert reset_on_change(
        "sales_selection", (2, "2024-05-01"), ("sales_create_seller", "sales_selected_order"), state
    )
    assert "sales_create_seller" not in state
    assert state["sales_selection"] == (2, "2024-05-01")
