"""
Balance engine tests.

Covers net balance computation, greedy settlement (including tie-break and
epsilon behaviour), input validation, and the properties every settlement
must satisfy: zero-sum, full settlement, determinism and the N-1 bound.
"""

import random
import pytest
from decimal import Decimal

from app.core.exceptions import InvalidExpenseError
from app.core.settlement import (
    SETTLEMENT_EPSILON,
    calculate_debts,
    collect_users,
    compute_net_balances,
    settle_balances,
    settlement_sort_key,
)
from app.models.debt_summary import DebtSummary
from app.models.expense import Expense, SplitDetail
from app.models.user import User
from conftest import make_expense


def as_tuples(debts):
    return [(d.from_user.user_id, d.to_user.user_id, d.amount) for d in debts]


def apply_settlements(net, debts):
    after = dict(net)
    for d in debts:
        after[d.from_user.user_id] += d.amount
        after[d.to_user.user_id] -= d.amount
    return after


def random_expenses(seed, user_count=6, expense_count=40):
    rng = random.Random(seed)
    users = [User(user_id=f"u{i}", name=f"User {i}") for i in range(user_count)]
    expenses = []
    for _ in range(expense_count):
        payer = rng.choice(users)
        sharers = rng.sample(users, rng.randint(1, user_count))
        shares = [(u, Decimal(rng.randint(0, 50000)) / 100) for u in sharers]
        price = sum((a for _, a in shares), Decimal("0"))
        expenses.append(Expense(
            price=price,
            paid_by=payer,
            split_details=tuple(SplitDetail(user=u, amount=a) for u, a in shares),
        ))
    return expenses


# ============================================================================
# NET BALANCES
# ============================================================================

class TestComputeNetBalances:

    def test_no_expenses(self):
        """Zero expenses give empty balances."""
        assert compute_net_balances([]) == {}

    def test_even_split_between_two(self, alice, bob):
        """Payer is owed the other user's share."""
        net = compute_net_balances([make_expense(100, alice, (alice, 50), (bob, 50))])

        assert net == {"alice": Decimal("50"), "bob": Decimal("-50")}

    def test_offsetting_expenses(self, alice, bob):
        """Two expenses in opposite directions net out."""
        net = compute_net_balances([
            make_expense(60, alice, (alice, 30), (bob, 30)),
            make_expense(40, bob, (alice, 20), (bob, 20)),
        ])

        assert net == {"alice": Decimal("10"), "bob": Decimal("-10")}

    def test_self_split_only(self, alice):
        """Paying entirely for yourself moves nothing."""
        net = compute_net_balances([make_expense(50, alice, (alice, 50))])

        assert net == {"alice": Decimal("0")}

    def test_empty_split_details(self, alice):
        """An expense with no shares recorded is a no-op."""
        net = compute_net_balances([make_expense(80, alice)])

        assert net == {"alice": Decimal("0")}

    def test_split_sum_mismatch_is_trusted(self, alice, bob):
        """Split amounts are used as recorded even when they don't match the price."""
        net = compute_net_balances([make_expense(100, alice, (bob, 70))])

        assert net == {"alice": Decimal("70"), "bob": Decimal("-70")}

    def test_zero_price_uses_splits(self, alice, bob):
        net = compute_net_balances([make_expense(0, alice, (bob, 5))])

        assert net["bob"] == Decimal("-5")

    def test_float_amounts_do_not_drift(self, alice, bob, carol):
        """Binary float inputs are accumulated as decimals."""
        expense = Expense(
            price=0.3,
            paid_by=alice,
            split_details=(SplitDetail(user=bob, amount=0.1), SplitDetail(user=carol, amount=0.2)),
        )
        net = compute_net_balances([expense] * 10)

        assert net["alice"] == Decimal("3.0")
        assert net["bob"] == Decimal("-1.0")
        assert net["carol"] == Decimal("-2.0")

    def test_accepts_generator(self, alice, bob):
        expenses = (make_expense(10, alice, (bob, 10)) for _ in range(3))

        assert compute_net_balances(expenses)["alice"] == Decimal("30")

    def test_negative_price_rejected(self, alice, bob):
        expenses = [
            make_expense(10, alice, (bob, 10)),
            make_expense(-5, alice, (bob, 5)),
        ]

        with pytest.raises(InvalidExpenseError) as exc:
            compute_net_balances(expenses)

        assert exc.value.field == "price"
        assert exc.value.index == 1

    def test_negative_split_amount_rejected(self, alice, bob):
        with pytest.raises(InvalidExpenseError) as exc:
            compute_net_balances([make_expense(10, alice, (bob, -10))])

        assert exc.value.field == "split_details.amount"
        assert exc.value.index == 0

    def test_non_finite_amount_rejected(self, alice, bob):
        expense = Expense(price=float("nan"), paid_by=alice, split_details=(SplitDetail(user=bob, amount=1),))

        with pytest.raises(InvalidExpenseError):
            compute_net_balances([expense])

    def test_validation_error_is_value_error(self, alice, bob):
        with pytest.raises(ValueError):
            compute_net_balances([make_expense(10, alice, (bob, "-1"))])


# ============================================================================
# SETTLEMENT
# ============================================================================

class TestSettleBalances:

    def test_empty(self):
        assert settle_balances({}) == []

    def test_single_pair(self, alice, bob):
        debts = settle_balances(
            {"alice": Decimal("50"), "bob": Decimal("-50")},
            users={"alice": alice, "bob": bob},
        )

        assert debts == [DebtSummary(from_user=bob, to_user=alice, amount=Decimal("50"))]

    def test_one_creditor_two_equal_debtors_tie_break(self):
        """Equal debts are settled in user_id order."""
        debts = settle_balances({"a": Decimal("60"), "c": Decimal("-30"), "b": Decimal("-30")})

        assert as_tuples(debts) == [("b", "a", Decimal("30")), ("c", "a", Decimal("30"))]

    def test_custom_sort_key(self):
        """Tie-break can be swapped, e.g. user_id descending."""
        def by_amount_then_id_desc(entry):
            uid, amount = entry
            return (-amount, [-ord(ch) for ch in uid])

        debts = settle_balances(
            {"a": Decimal("60"), "b": Decimal("-30"), "c": Decimal("-30")},
            sort_key=by_amount_then_id_desc,
        )

        assert [d.from_user.user_id for d in debts] == ["c", "b"]

    def test_largest_outstanding_matched_each_round(self):
        """Parties are re-ranked after every transfer."""
        debts = settle_balances({
            "a": Decimal("50"),
            "b": Decimal("30"),
            "d": Decimal("-60"),
            "e": Decimal("-20"),
        })

        assert as_tuples(debts) == [
            ("d", "a", Decimal("50")),
            ("e", "b", Decimal("20")),
            ("d", "b", Decimal("10")),
        ]

    def test_balances_below_epsilon_dropped(self):
        assert settle_balances({"a": Decimal("0.004"), "b": Decimal("-0.004")}) == []

    def test_epsilon_is_configurable(self):
        debts = settle_balances({"a": Decimal("0.004"), "b": Decimal("-0.004")}, epsilon=Decimal("0"))

        assert as_tuples(debts) == [("b", "a", Decimal("0.004"))]

    def test_default_epsilon(self):
        assert SETTLEMENT_EPSILON == Decimal("0.005")

    def test_negative_epsilon_rejected(self):
        with pytest.raises(ValueError):
            settle_balances({}, epsilon=Decimal("-1"))

    def test_rounding_residue_produces_no_extra_entry(self):
        """A creditor left with sub-epsilon change is not paid again."""
        debts = settle_balances({"a": Decimal("10.003"), "b": Decimal("-10")})

        assert as_tuples(debts) == [("b", "a", Decimal("10"))]

    def test_zero_balances_ignored(self):
        debts = settle_balances({"a": Decimal("0"), "b": Decimal("5"), "c": Decimal("-5")})

        assert as_tuples(debts) == [("c", "b", Decimal("5"))]

    def test_unknown_users_get_placeholder(self):
        debts = settle_balances({"x": Decimal("1"), "y": Decimal("-1")})

        assert debts[0].from_user == User(user_id="y")
        assert debts[0].to_user == User(user_id="x")

    def test_sort_key_orders_by_magnitude_then_id(self):
        entries = [("b", Decimal("5")), ("a", Decimal("5")), ("c", Decimal("9"))]

        assert sorted(entries, key=settlement_sort_key) == [
            ("c", Decimal("9")),
            ("a", Decimal("5")),
            ("b", Decimal("5")),
        ]


# ============================================================================
# END TO END
# ============================================================================

class TestCalculateDebts:

    def test_no_expenses(self):
        assert calculate_debts([]) == []

    def test_two_users(self, alice, bob):
        debts = calculate_debts([make_expense(100, alice, (alice, 50), (bob, 50))])

        assert debts == [DebtSummary(from_user=bob, to_user=alice, amount=Decimal("50"))]

    def test_two_expenses_net_out(self, alice, bob):
        debts = calculate_debts([
            make_expense(60, alice, (alice, 30), (bob, 30)),
            make_expense(40, bob, (alice, 20), (bob, 20)),
        ])

        assert debts == [DebtSummary(from_user=bob, to_user=alice, amount=Decimal("10"))]

    def test_three_users_even_split(self, alice, bob, carol):
        debts = calculate_debts([make_expense(90, alice, (alice, 30), (bob, 30), (carol, 30))])

        assert debts == [
            DebtSummary(from_user=bob, to_user=alice, amount=Decimal("30")),
            DebtSummary(from_user=carol, to_user=alice, amount=Decimal("30")),
        ]

    def test_self_paid_expense_alone(self, alice):
        assert calculate_debts([make_expense(42, alice, (alice, 42))]) == []

    def test_summaries_carry_full_users(self, alice, bob):
        debts = calculate_debts([make_expense(10, alice, (bob, 10))])

        assert debts[0].from_user.name == "Bob"
        assert debts[0].to_user.profile_image == "alice"

    def test_collect_users_first_seen_wins(self, alice):
        renamed = User(user_id="alice", name="Alicia")
        users = collect_users([make_expense(1, alice), make_expense(1, renamed)])

        assert users["alice"].name == "Alice"


# ============================================================================
# PROPERTIES
# ============================================================================

@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
class TestSettlementProperties:

    def test_zero_sum(self, seed):
        net = compute_net_balances(random_expenses(seed))

        positive = sum((v for v in net.values() if v > 0), Decimal("0"))
        negative = sum((-v for v in net.values() if v < 0), Decimal("0"))
        assert positive == negative

    def test_settlements_clear_all_balances(self, seed):
        expenses = random_expenses(seed)
        net = compute_net_balances(expenses)
        debts = calculate_debts(expenses)

        after = apply_settlements(net, debts)
        assert all(abs(v) < SETTLEMENT_EPSILON for v in after.values())

    def test_amounts_positive_and_not_self(self, seed):
        for d in calculate_debts(random_expenses(seed)):
            assert d.amount > 0
            assert d.from_user != d.to_user

    def test_deterministic(self, seed):
        expenses = random_expenses(seed)

        assert calculate_debts(expenses) == calculate_debts(expenses)

    def test_at_most_n_minus_one_transfers(self, seed):
        expenses = random_expenses(seed)
        net = compute_net_balances(expenses)
        nonzero = [v for v in net.values() if abs(v) >= SETTLEMENT_EPSILON]

        assert len(calculate_debts(expenses)) <= max(len(nonzero) - 1, 0)
