"""
Tests for the in-process contract: group management, balances, simplification,
settlement guards and reentrancy.
"""
import random
import pytest
from splitchain.core.exceptions import (
    AlreadyMemberError, GroupNotFoundError, InvalidAmountError, InvalidExpenseError, NoOutstandingDebtError,
    NotAGroupMemberError, OverpaymentRejectedError, ReentrancyError, SelfSettlementError,
    TransferRejectedError
)
from splitchain.core.money import parse_amount
from splitchain.services.balance_service import ExpenseRecord, compute_balances
from splitchain.services.debt_service import simplify_debts
from splitchain.services.mirror_contract import ReentrancyGuard, SplitChainMirror
from splitchain.services.transfer_service import TransferReceipt

ALICE = "0x" + "a" * 40
BOB = "0x" + "b" * 40
CAROL = "0x" + "c" * 40
OUTSIDER = "0x" + "f" * 40
ETHER = 10 ** 18


def parse_ether(value: str) -> int:
    return parse_amount(value, decimals=18)


@pytest.fixture
def mirror():
    return SplitChainMirror()


@pytest.fixture
def group_id(mirror):
    return mirror.create_group(ALICE, "Trip Fund", [BOB, CAROL])


class TestGroupManagement:

    def test_create_group_with_initial_members(self, mirror):
        group_id = mirror.create_group(ALICE, "Beach Trip", [BOB, CAROL])
        name, creator, active, member_count = mirror.get_group(group_id)
        assert (name, creator, active, member_count) == ("Beach Trip", ALICE, True, 3)
        assert mirror.get_group_members(group_id) == [ALICE, BOB, CAROL]

    def test_create_group_emits_events(self, mirror):
        mirror.create_group(ALICE, "Roommates", [BOB])
        names = [e.name for e in mirror.events]
        assert names == ["GroupCreated", "MemberJoined", "MemberJoined"]
        assert mirror.events[0].args == {"group_id": 1, "name": "Roommates", "creator": ALICE}

    def test_join_existing_group(self, mirror, group_id):
        mirror.join_group(OUTSIDER, group_id)
        assert OUTSIDER in mirror.get_group_members(group_id)
        assert mirror.events[-1].args == {"group_id": group_id, "member": OUTSIDER}

    def test_reject_joining_twice(self, mirror, group_id):
        with pytest.raises(AlreadyMemberError):
            mirror.join_group(BOB, group_id)

    def test_reject_invalid_group(self, mirror):
        with pytest.raises(GroupNotFoundError):
            mirror.join_group(ALICE, 999)

    def test_user_groups(self, mirror):
        mirror.create_group(ALICE, "Group 1", [BOB])
        mirror.create_group(BOB, "Group 2", [CAROL])
        mirror.create_group(CAROL, "Group 3", [ALICE])
        assert mirror.get_user_groups(ALICE) == [1, 3]
        assert mirror.get_user_groups(BOB) == [1, 2]
        assert mirror.get_user_groups(OUTSIDER) == []


class TestExpenses:

    def test_add_expense_with_equal_split(self, mirror, group_id):
        amount = parse_ether("0.15")
        expense_id = mirror.add_expense(ALICE, group_id, amount, "Hotel booking", [ALICE, BOB, CAROL])
        gid, payer, exp_amount, description, _, participants = mirror.get_expense(expense_id)
        assert (gid, payer, exp_amount, description) == (group_id, ALICE, amount, "Hotel booking")
        assert len(participants) == 3
        assert mirror.events[-1].name == "ExpenseAdded"

    def test_reject_expense_from_non_member(self, mirror, group_id):
        with pytest.raises(NotAGroupMemberError):
            mirror.add_expense(OUTSIDER, group_id, ETHER, "Dinner", [ALICE])

    def test_reject_non_member_participant(self, mirror, group_id):
        with pytest.raises(NotAGroupMemberError):
            mirror.add_expense(ALICE, group_id, ETHER, "Dinner", [OUTSIDER])
        assert mirror.get_all_balances(group_id)[1] == [0, 0, 0]

    def test_reject_invalid_expense(self, mirror, group_id):
        with pytest.raises(InvalidAmountError):
            mirror.add_expense(ALICE, group_id, 0, "Nothing", [BOB])
        with pytest.raises(InvalidExpenseError):
            mirror.add_expense(ALICE, group_id, 10, "Nobody", [])

    def test_expense_history(self, mirror, group_id):
        mirror.add_expense(ALICE, group_id, parse_ether("0.1"), "Expense 1", [ALICE, BOB])
        mirror.add_expense(BOB, group_id, parse_ether("0.05"), "Expense 2", [BOB, CAROL])
        assert mirror.get_group_expenses(group_id) == [1, 2]


class TestBalances:

    def test_balances_after_expense(self, mirror, group_id):
        mirror.add_expense(ALICE, group_id, parse_ether("0.15"), "Hotel", [ALICE, BOB, CAROL])
        assert mirror.get_member_balance(group_id, ALICE) == parse_ether("0.1")
        assert mirror.get_member_balance(group_id, BOB) == -parse_ether("0.05")
        assert mirror.get_member_balance(group_id, CAROL) == -parse_ether("0.05")

    def test_multiple_expenses(self, mirror, group_id):
        mirror.add_expense(ALICE, group_id, parse_ether("0.15"), "Hotel", [ALICE, BOB, CAROL])
        mirror.add_expense(BOB, group_id, parse_ether("0.06"), "Dinner", [ALICE, BOB, CAROL])
        assert mirror.get_member_balance(group_id, ALICE) == parse_ether("0.08")
        assert mirror.get_member_balance(group_id, BOB) == -parse_ether("0.01")
        assert mirror.get_member_balance(group_id, CAROL) == -parse_ether("0.07")

    def test_all_balances_sum_to_zero(self, mirror, group_id):
        mirror.add_expense(ALICE, group_id, 100, "Groceries", [ALICE, BOB, CAROL])
        members, balances = mirror.get_all_balances(group_id)
        assert members == [ALICE, BOB, CAROL]
        assert len(balances) == 3
        assert sum(balances) == 0

    def test_matches_off_chain_aggregation(self, mirror, group_id):
        """Same records, same balances on both sides."""
        rng = random.Random(7)
        records = []
        for _ in range(30):
            payer = rng.choice([ALICE, BOB, CAROL])
            participants = rng.sample([ALICE, BOB, CAROL], rng.randint(1, 3))
            amount = rng.randint(1, 10 ** 19)
            mirror.add_expense(payer, group_id, amount, "x", participants)
            records.append(ExpenseRecord(payer, amount, participants))
        members, balances = mirror.get_all_balances(group_id)
        assert dict(zip(members, balances)) == dict(compute_balances(members, records, []))


class TestSimplification:

    def test_simplify_debts(self, mirror, group_id):
        mirror.add_expense(ALICE, group_id, parse_ether("0.15"), "Expense 1", [ALICE, BOB, CAROL])
        debts = mirror.get_simplified_debts(group_id)
        assert len(debts) == 2
        assert all(creditor == ALICE for _, creditor, _ in debts)
        assert sum(amount for _, _, amount in debts) == parse_ether("0.1")

    def test_empty_when_settled(self, mirror, group_id):
        assert mirror.get_simplified_debts(group_id) == []

    def test_cross_check_with_off_chain_simplifier(self, mirror):
        """Both implementations produce the same transfer list."""
        rng = random.Random(11)
        members = [ALICE, BOB, CAROL, OUTSIDER]
        group_id = mirror.create_group(ALICE, "Cross", members)
        for _ in range(40):
            payer = rng.choice(members)
            participants = rng.sample(members, rng.randint(1, 4))
            mirror.add_expense(payer, group_id, rng.randint(1, 1000), "x", participants)
            names, balances = mirror.get_all_balances(group_id)
            expected = [tuple(d) for d in simplify_debts(dict(zip(names, balances)))]
            assert mirror.get_simplified_debts(group_id) == expected


class TestSettlement:

    @pytest.fixture(autouse=True)
    def hotel(self, mirror, group_id):
        mirror.add_expense(ALICE, group_id, parse_ether("0.15"), "Hotel", [ALICE, BOB, CAROL])

    def test_settle_debt(self, mirror, group_id):
        receipt = mirror.settle(BOB, group_id, ALICE, parse_ether("0.05"))
        assert receipt.confirmed_amount == parse_ether("0.05")
        assert mirror.get_member_balance(group_id, BOB) == 0
        assert mirror.get_member_balance(group_id, ALICE) == parse_ether("0.05")

        event = mirror.settlement_events()[-1]
        assert event.reference == receipt.reference
        assert event.args == {
            "group_id": group_id, "debtor": BOB, "creditor": ALICE, "amount": parse_ether("0.05")
        }

    def test_partial_settlement(self, mirror, group_id):
        mirror.settle(BOB, group_id, ALICE, parse_ether("0.02"))
        assert mirror.get_member_balance(group_id, BOB) == -parse_ether("0.03")

    def test_references_are_unique(self, mirror, group_id):
        first = mirror.settle(BOB, group_id, ALICE, 1)
        second = mirror.settle(BOB, group_id, ALICE, 1)
        assert first.reference != second.reference

    def test_reject_zero_value(self, mirror, group_id):
        with pytest.raises(InvalidAmountError):
            mirror.settle(BOB, group_id, ALICE, 0)

    def test_reject_settling_with_yourself(self, mirror, group_id):
        with pytest.raises(SelfSettlementError):
            mirror.settle(ALICE, group_id, ALICE, parse_ether("0.01"))

    def test_reject_overpayment(self, mirror, group_id):
        with pytest.raises(OverpaymentRejectedError):
            mirror.settle(BOB, group_id, ALICE, parse_ether("0.1"))
        assert mirror.get_member_balance(group_id, BOB) == -parse_ether("0.05")

    def test_reject_when_no_debt(self, mirror, group_id):
        with pytest.raises(NoOutstandingDebtError):
            mirror.settle(ALICE, group_id, BOB, parse_ether("0.01"))

    def test_reject_creditor_not_owed(self, mirror, group_id):
        with pytest.raises(NoOutstandingDebtError):
            mirror.settle(BOB, group_id, CAROL, parse_ether("0.01"))

    def test_reject_non_member_creditor(self, mirror, group_id):
        with pytest.raises(NotAGroupMemberError):
            mirror.settle(BOB, group_id, OUTSIDER, 1)

    def test_failed_transfer_restores_balances(self):
        def failing_transfer(sender, recipient, value):
            raise TransferRejectedError("rejected")

        mirror = SplitChainMirror(transfer=failing_transfer)
        group_id = mirror.create_group(ALICE, "Trip", [BOB])
        mirror.add_expense(ALICE, group_id, 100, "Hotel", [ALICE, BOB])
        with pytest.raises(TransferRejectedError):
            mirror.settle(BOB, group_id, ALICE, 50)
        assert mirror.get_all_balances(group_id) == ([ALICE, BOB], [50, -50])
        assert mirror.settlement_events() == []


class TestReentrancy:

    def test_guard_rejects_nested_entry(self):
        guard = ReentrancyGuard()
        with guard:
            assert guard.locked
            with pytest.raises(ReentrancyError):
                with guard:
                    pass
        assert not guard.locked

    def test_guard_released_after_error(self):
        guard = ReentrancyGuard()
        with pytest.raises(ValueError):
            with guard:
                raise ValueError("boom")
        assert not guard.locked

    def test_nested_settle_fails_inner_call_only(self):
        """A transfer hook calling back into settle is rejected loudly."""
        inner_errors = []
        mirror = None

        def reentrant_transfer(sender, recipient, value):
            try:
                mirror.settle(sender, 1, recipient, 1)
            except ReentrancyError as e:
                inner_errors.append(e)
            return TransferReceipt(reference="0xouter", confirmed_amount=value)

        mirror = SplitChainMirror(transfer=reentrant_transfer)
        group_id = mirror.create_group(ALICE, "Trip", [BOB])
        mirror.add_expense(ALICE, group_id, 100, "Hotel", [ALICE, BOB])

        receipt = mirror.settle(BOB, group_id, ALICE, 20)
        assert receipt.reference == "0xouter"
        assert len(inner_errors) == 1
        assert mirror.get_member_balance(group_id, BOB) == -30
        assert [e.reference for e in mirror.settlement_events()] == ["0xouter"]

    def test_propagated_reentrancy_reverts_outer_call(self):
        mirror = None
        attempts = []

        def reentrant_transfer(sender, recipient, value):
            attempts.append(value)
            if len(attempts) == 1:
                return mirror.settle(sender, 1, recipient, 1)
            return TransferReceipt(reference="0xsecond", confirmed_amount=value)

        mirror = SplitChainMirror(transfer=reentrant_transfer)
        group_id = mirror.create_group(ALICE, "Trip", [BOB])
        mirror.add_expense(ALICE, group_id, 100, "Hotel", [ALICE, BOB])

        with pytest.raises(ReentrancyError):
            mirror.settle(BOB, group_id, ALICE, 20)
        assert mirror.get_member_balance(group_id, BOB) == -50
        # The guard is free again afterwards
        mirror.settle(BOB, group_id, ALICE, 20)
        assert mirror.get_member_balance(group_id, BOB) == -30
