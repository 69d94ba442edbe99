from ledgerlens.ingestion.column_aliases import (
    ACCOUNT_CODE,
    ACCOUNT_NAME,
    AMOUNT,
    CATEGORY,
    CURRENCY,
    PERIOD,
    RECORDED_AT,
    SUB_CATEGORY,
    bind_columns,
    looks_like_header,
    missing_required,
)


class TestLooksLikeHeader:
    def test_two_keywords_make_a_header(self) -> None:
        assert looks_like_header(["Account Name", None, "Amount"])

    def test_single_keyword_is_not_enough(self) -> None:
        assert not looks_like_header(["Quarterly Amount Report", None, None])

    def test_ignores_case(self) -> None:
        assert looks_like_header(["PERIOD", "CATEGORY"])


class TestBindColumns:
    def test_binds_exact_aliases(self) -> None:
        bound = bind_columns(
            ["Account", "Code", "Time Period", "Value", "Currency", "Type", "Subcategory", "Date"]
        )
        assert bound == {
            ACCOUNT_NAME: 0,
            ACCOUNT_CODE: 1,
            PERIOD: 2,
            AMOUNT: 3,
            CURRENCY: 4,
            CATEGORY: 5,
            SUB_CATEGORY: 6,
            RECORDED_AT: 7,
        }

    def test_falls_back_to_keyword_rules(self) -> None:
        bound = bind_columns(["GL Account Name", "Fiscal Period", "Net Amount (USD)", "Main Category"])
        assert bound[ACCOUNT_NAME] == 0
        assert bound[PERIOD] == 1
        assert bound[AMOUNT] == 2
        assert bound[CATEGORY] == 3

    def test_category_rule_skips_sub_category_columns(self) -> None:
        bound = bind_columns(["Sub Category Label", "Category Group"])
        assert bound[CATEGORY] == 1
        assert bound[SUB_CATEGORY] == 0

    def test_exact_match_beats_earlier_keyword_match(self) -> None:
        bound = bind_columns(["Billing Amount", "Amount"])
        assert bound[AMOUNT] == 1

    def test_first_exact_column_wins(self) -> None:
        bound = bind_columns(["Amount", "Value"])
        assert bound[AMOUNT] == 0

    def test_missing_required_lists_absent_fields(self) -> None:
        bound = bind_columns(["Account Name", "Amount"])
        assert missing_required(bound) == [PERIOD, CATEGORY]
