import io

import pytest

from seat_autofill.csv_loader import load_guests, load_proximity_rules, load_tables, split_guests


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return path


class TestLoadGuests:
    def test_reads_all_columns(self, tmp_path):
        path = write(tmp_path, "guests.csv", (
            "id,name,category,country,organization,ranking,deleted\n"
            "007,Bond,External,UK,MI6,2.5,false\n"
            "g2,Moneypenny,host,,,,TRUE\n"
        ))
        bond, penny = load_guests(path)
        assert bond.id == "007"
        assert bond.category == "external"
        assert bond.ranking == 2.5
        assert bond.organization == "MI6"
        assert penny.ranking == 0
        assert penny.deleted is True

    def test_optional_columns_may_be_absent(self):
        guests = load_guests(io.StringIO("id,name,category\na,Ann,host\nb,Bob,external\n"))
        hosts, externals = split_guests(guests)
        assert [g.id for g in hosts] == ["a"]
        assert [g.id for g in externals] == ["b"]
        assert hosts[0].country == ""

    def test_rejects_unknown_category(self):
        with pytest.raises(ValueError, match="Unknown category"):
            load_guests(io.StringIO("id,name,category\na,Ann,vip\n"))

    def test_rejects_duplicate_ids(self):
        with pytest.raises(ValueError, match="Duplicate guest ids: a"):
            load_guests(io.StringIO("id,name,category\na,Ann,host\na,Anna,external\n"))

    def test_rejects_missing_columns(self):
        with pytest.raises(ValueError, match="missing columns: category"):
            load_guests(io.StringIO("id,name\na,Ann\n"))


class TestLoadTables:
    HEADER = "table_id,table_label,table_number,seat_id,seat_number,locked,assigned_guest_id,adjacent_seats,mode\n"

    def test_groups_seats_by_table(self, tmp_path):
        path = write(tmp_path, "seats.csv", self.HEADER + (
            "B,Garden,2,b1,1,false,,b2,default\n"
            "B,Garden,2,b2,2,true,g1,b1,host-only\n"
            "A,,,a1,1,,,,\n"
        ))
        garden, plain = load_tables(path, guest_ids={"g1"})
        assert garden.id == "B"
        assert garden.label == "Garden"
        assert garden.table_number == 2
        assert [s.id for s in garden.seats] == ["b1", "b2"]
        assert garden.seats[1].locked is True
        assert garden.seats[1].assigned_guest_id == "g1"
        assert garden.seats[1].mode == "host-only"
        assert garden.seats[0].adjacent_seats == ["b2"]
        assert plain.label == "A"
        assert plain.table_number is None
        assert plain.seats[0].mode == "default"
        assert plain.seats[0].adjacent_seats == []

    def test_rejects_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown seat mode"):
            load_tables(io.StringIO(self.HEADER + "A,,,a1,1,,,,vip-only\n"))

    def test_rejects_unknown_adjacent_seat(self):
        with pytest.raises(ValueError, match="unknown adjacent seat a9"):
            load_tables(io.StringIO(self.HEADER + "A,,,a1,1,,,a9,\n"))

    def test_rejects_unknown_assigned_guest(self):
        with pytest.raises(ValueError, match="unknown guest: ghost"):
            load_tables(io.StringIO(self.HEADER + "A,,,a1,1,true,ghost,,\n"), guest_ids={"g1"})


class TestLoadRules:
    def test_splits_by_rule_type(self):
        rules = load_proximity_rules(io.StringIO(
            "id,guest1_id,guest2_id,rule\n"
            "r1,a,b,together\n"
            ",c,d,Sit-Away\n"
            "r3,a,c,sit_together\n"
        ))
        assert [(r.id, r.guest1_id, r.guest2_id) for r in rules.sit_together] == [("r1", "a", "b"), ("r3", "a", "c")]
        # missing id falls back to the row position
        assert [(r.id, r.guest1_id) for r in rules.sit_away] == [("1", "c")]

    def test_rejects_unknown_rule_type(self):
        with pytest.raises(ValueError, match="Unknown rule type"):
            load_proximity_rules(io.StringIO("guest1_id,guest2_id,rule\na,b,near\n"))

    def test_rejects_unknown_guest(self):
        with pytest.raises(ValueError, match="unknown guest"):
            load_proximity_rules(io.StringIO("guest1_id,guest2_id,rule\na,zz,away\n"), guest_ids={"a", "b"})
