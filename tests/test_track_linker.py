from factories import at, make_state
from overhead.ingestors.state_vectors import parse_state_vector
from overhead.services.track_linker import AnonymousTrackLinker, is_anonymous


def _anonymous(latitude, longitude):
    return parse_state_vector(make_state(None, latitude, longitude, callsign=None))


def test_identified_tracks_are_untouched():
    linker = AnonymousTrackLinker()
    tracks = [
        parse_state_vector(make_state("abc123", 0.0, 0.0)),
        parse_state_vector(make_state(None, 0.0, 0.0, callsign="NOHEX1")),
    ]

    assert linker.link(tracks, at(0)) == tracks
    assert not any(is_anonymous(track) for track in tracks)


def test_anonymous_track_keeps_its_id_while_moving():
    linker = AnonymousTrackLinker(max_speed_mps=340)

    (first,) = linker.link([_anonymous(0.0, 0.0)], at(0))
    (second,) = linker.link([_anonymous(0.0, 0.04)], at(30))
    (third,) = linker.link([_anonymous(0.0, 0.08)], at(60))

    assert _anonymous(0.0, 0.04).id != first.id
    assert second.id == first.id
    assert third.id == first.id


def test_track_beyond_reach_gets_a_new_id():
    linker = AnonymousTrackLinker(max_speed_mps=100)

    (first,) = linker.link([_anonymous(0.0, 0.0)], at(0))
    (second,) = linker.link([_anonymous(0.0, 0.1)], at(30))

    assert second.id != first.id


def test_two_anonymous_tracks_keep_distinct_ids():
    linker = AnonymousTrackLinker()

    west, east = linker.link([_anonymous(0.0, -0.05), _anonymous(0.0, 0.05)], at(0))
    moved_west, moved_east = linker.link(
        [_anonymous(0.0, -0.04), _anonymous(0.0, 0.06)], at(30)
    )

    assert west.id != east.id
    assert moved_west.id == west.id
    assert moved_east.id == east.id


def test_fresh_id_never_collides_with_a_carried_id():
    linker = AnonymousTrackLinker(max_speed_mps=1)

    (first,) = linker.link([_anonymous(0.0, 0.0)], at(0))
    # The mover crosses into the next cell; the newcomer lands in the old one
    moved, newcomer = linker.link([_anonymous(0.0, -0.0001), _anonymous(0.0, 0.009)], at(30))

    assert moved.id == first.id
    assert _anonymous(0.0, 0.009).id == first.id
    assert newcomer.id == f"{first.id}-1"
