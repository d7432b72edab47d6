import json
from datetime import date, timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import Client, TestCase
from django.urls import reverse
from django.utils import timezone

from SWMG.models import CourseHoles, Courses, Entries, Groups, HoleScore, Players, ScoreConflict, Tournaments
from SWMG.services import results


class ScoringApiTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.course = Courses.objects.create(CourseName='The Preserve', Par=72, CourseRating=Decimal('72.0'), SlopeRating=113)
        cls.tournament = Tournaments.objects.create(
            Name='Saturday Skins', PlayDate=date(2025, 6, 7), Course=cls.course, PotAmount=9000,
            ParticipantsForSkins=2,
        )
        cls.group = Groups.objects.create(Tournament=cls.tournament, GroupName='Group A')
        cls.ann = Entries.objects.create(
            Tournament=cls.tournament, Player=Players.objects.create(Name='Ann Lee', Index=Decimal('2.0')), Group=cls.group,
        )
        cls.bob = Entries.objects.create(
            Tournament=cls.tournament, Player=Players.objects.create(Name='Bob Ray', Index=Decimal('0.0')), Group=cls.group,
        )

    def setUp(self):
        self.client = Client()
        cache.clear()

    def _post(self, url_name, data, **kwargs):
        return self.client.post(reverse(url_name, kwargs=kwargs), json.dumps(data), content_type='application/json')

    def _edit(self, entry, hole, strokes, client_at=None):
        return {
            'entryId': entry.id,
            'hole': hole,
            'strokes': strokes,
            'clientUpdatedAt': (client_at or timezone.now()).isoformat(),
        }

    #### submit ####

    def test_submit_accepted(self):
        response = self._post('submit_score_view', self._edit(self.ann, 1, 4))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['status'], 'accepted')
        self.assertEqual(body['score']['strokes'], 4)
        self.assertEqual(HoleScore.objects.get(Entry=self.ann, HoleNumber=1).Strokes, 4)

    def test_submit_stale_is_ignored_not_an_error(self):
        self._post('submit_score_view', self._edit(self.ann, 1, 4))
        response = self._post('submit_score_view', self._edit(self.ann, 1, 6, timezone.now() - timedelta(hours=1)))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual((body['status'], body['reason']), ('ignored', 'stale'))
        self.assertTrue(ScoreConflict.objects.filter(pk=body['conflictId']).exists())
        self.assertEqual(HoleScore.objects.get(Entry=self.ann, HoleNumber=1).Strokes, 4)

    def test_submit_validates_ranges(self):
        for field, value in (('strokes', 16), ('strokes', 0), ('hole', 19), ('hole', 0)):
            data = self._edit(self.ann, 1, 4)
            data[field] = value
            response = self._post('submit_score_view', data)
            self.assertEqual(response.status_code, 400)
            self.assertIn(field, response.json()['fields'])
        self.assertFalse(HoleScore.objects.exists())

    def test_submit_requires_timestamp(self):
        data = self._edit(self.ann, 1, 4)
        del data['clientUpdatedAt']
        response = self._post('submit_score_view', data)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'validation_failed')

    def test_submit_rejects_non_object_body(self):
        response = self.client.post(reverse('submit_score_view'), '[1, 2]', content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_submit_unknown_entry(self):
        data = self._edit(self.ann, 1, 4)
        data['entryId'] = 999999
        self.assertEqual(self._post('submit_score_view', data).status_code, 404)

    def test_submit_get_not_allowed(self):
        self.assertEqual(self.client.get(reverse('submit_score_view')).status_code, 405)

    def test_submit_final_tournament(self):
        Tournaments.objects.filter(pk=self.tournament.pk).update(IsFinal=True)
        response = self._post('submit_score_view', self._edit(self.ann, 1, 4))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error'], 'tournament_final')

    def test_batch_submit(self):
        edits = [self._edit(self.ann, 1, 4), self._edit(self.bob, 1, 5), dict(self._edit(self.bob, 2, 4), strokes=20)]
        response = self._post('submit_score_batch_view', {'edits': edits})
        self.assertEqual(response.status_code, 200)
        results = response.json()['results']
        self.assertEqual([r.get('status') for r in results], ['accepted', 'accepted', None])
        self.assertIn('strokes', results[2]['fields'])

    def test_batch_requires_list(self):
        self.assertEqual(self._post('submit_score_batch_view', {'edits': 'nope'}).status_code, 400)

    def test_batch_size_limit(self):
        with self.settings(SWMG_BATCH_MAX_EDITS=1):
            edits = [self._edit(self.ann, 1, 4), self._edit(self.ann, 2, 4)]
            self.assertEqual(self._post('submit_score_batch_view', {'edits': edits}).status_code, 400)

    #### refetch ####

    def test_entry_and_group_scores(self):
        self._post('submit_score_view', self._edit(self.ann, 3, 5))
        response = self.client.get(reverse('entry_scores_view', kwargs={'entry_id': self.ann.id}))
        self.assertEqual(response.json(), {'scores': {str(self.ann.id): {'3': 5}}})

        response = self.client.get(reverse('group_scores_view', kwargs={'group_id': self.group.id}))
        self.assertEqual(response.json()['scores'][str(self.bob.id)], {})

    #### results ####

    def _score_round(self):
        # Ann wins holes 1 and 2, Bob wins 3, hole 4 is a push
        for entry, strokes in ((self.ann, [3, 3, 5, 4]), (self.bob, [4, 4, 4, 4])):
            for hole, s in enumerate(strokes, start=1):
                self._post('submit_score_view', self._edit(entry, hole, s))

    def test_leaderboards(self):
        self._score_round()
        response = self.client.get(reverse('leaderboards_view', kwargs={'tournament_id': self.tournament.id}))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['coursePar'], 72)
        self.assertEqual([(r['playerName'], r['grossTotal'], r['position']) for r in body['gross']],
                         [('Ann Lee', 15, '1'), ('Bob Ray', 16, '2')])
        # no hole table for this course, net ties fall back to gross segments
        self.assertTrue(body['netTiebreakFallback'])
        self.assertEqual(body['warnings'], ['course_holes_incomplete'])
        self.assertEqual(body['gross'][0]['holeScores'], {'1': 3, '2': 3, '3': 5, '4': 4})

    def test_leaderboards_see_new_scores_despite_cache(self):
        self._score_round()
        url = reverse('leaderboards_view', kwargs={'tournament_id': self.tournament.id})
        self.client.get(url)
        with self.captureOnCommitCallbacks(execute=True):
            self._post('submit_score_view', self._edit(self.bob, 5, 3))
        bob = [r for r in self.client.get(url).json()['gross'] if r['entryId'] == self.bob.id][0]
        self.assertEqual(bob['grossTotal'], 19)

    def test_score_write_clears_cache_only_after_commit(self):
        self._score_round()
        url = reverse('leaderboards_view', kwargs={'tournament_id': self.tournament.id})
        self.client.get(url)
        key = results._cache_key('leaderboards', self.tournament.id)

        with self.captureOnCommitCallbacks() as callbacks:
            self._post('submit_score_view', self._edit(self.bob, 5, 3))
            # still inside the transaction: the cached board is untouched
            self.assertIsNotNone(cache.get(key))
        self.assertIsNotNone(cache.get(key))

        for callback in callbacks:
            callback()
        self.assertIsNone(cache.get(key))

    def test_leaderboards_unknown_tournament(self):
        response = self.client.get(reverse('leaderboards_view', kwargs={'tournament_id': 999999}))
        self.assertEqual(response.status_code, 404)

    def test_skins(self):
        self._score_round()
        response = self.client.get(reverse('skins_view', kwargs={'tournament_id': self.tournament.id}))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['totalSkins'], 3)
        self.assertEqual(body['potAmount'], 9000)
        self.assertEqual(body['payoutPerSkin'], 3000)
        self.assertEqual(
            [(r['playerName'], r['skins'], r['holes'], r['payout'], r['payoutDisplay']) for r in body['leaderboard']],
            [('Ann Lee', 2, [1, 2], 6000, '$60.00'), ('Bob Ray', 1, [3], 3000, '$30.00')],
        )
        hole4 = body['results'][3]
        self.assertEqual((hole4['isPush'], hole4['pushCount'], hole4['pushScore']), (True, 2, 4))
        self.assertTrue(body['results'][4]['noResult'])

    #### conflicts ####

    def _make_conflict(self):
        self._post('submit_score_view', self._edit(self.ann, 1, 4))
        body = self._post('submit_score_view', self._edit(self.ann, 1, 6, timezone.now() - timedelta(hours=1))).json()
        return body['conflictId']

    def test_conflict_list(self):
        conflict_id = self._make_conflict()
        response = self.client.get(reverse('conflicts_view', kwargs={'tournament_id': self.tournament.id}))
        conflicts = response.json()['conflicts']
        self.assertEqual([c['id'] for c in conflicts], [conflict_id])
        self.assertEqual(conflicts[0]['playerName'], 'Ann Lee')

    def test_conflict_force_local(self):
        conflict_id = self._make_conflict()
        response = self._post('conflict_resolve_view', {'action': 'force-local', 'forceValue': 5}, conflict_id=conflict_id)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['score']['strokes'], 5)

        scores = self.client.get(reverse('entry_scores_view', kwargs={'entry_id': self.ann.id})).json()['scores']
        self.assertEqual(scores[str(self.ann.id)]['1'], 5)
        conflicts = self.client.get(reverse('conflicts_view', kwargs={'tournament_id': self.tournament.id})).json()
        self.assertEqual(conflicts['conflicts'], [])

    def test_conflict_force_value_out_of_range(self):
        conflict_id = self._make_conflict()
        response = self._post('conflict_resolve_view', {'action': 'force-local', 'forceValue': 20}, conflict_id=conflict_id)
        self.assertEqual(response.status_code, 400)
        self.assertIn('forceValue', response.json()['fields'])
        self.assertEqual(HoleScore.objects.get(Entry=self.ann, HoleNumber=1).Strokes, 4)
        self.assertFalse(ScoreConflict.objects.get(pk=conflict_id).Resolved)

    def test_conflict_force_value_only_with_force_local(self):
        conflict_id = self._make_conflict()
        response = self._post('conflict_resolve_view', {'action': 'apply-server', 'forceValue': 5}, conflict_id=conflict_id)
        self.assertEqual(response.status_code, 400)

    def test_conflict_already_resolved(self):
        conflict_id = self._make_conflict()
        self._post('conflict_resolve_view', {'action': 'apply-server'}, conflict_id=conflict_id)
        response = self._post('conflict_resolve_view', {'action': 'apply-server'}, conflict_id=conflict_id)
        self.assertEqual(response.status_code, 400)

    def test_conflict_unknown(self):
        response = self._post('conflict_resolve_view', {'action': 'apply-server'}, conflict_id=999999)
        self.assertEqual(response.status_code, 404)

    def test_clear_conflicts(self):
        self._make_conflict()
        url = reverse('conflicts_view', kwargs={'tournament_id': self.tournament.id})
        self.assertEqual(self.client.delete(url).json(), {'cleared': 1})
        self.assertEqual(self.client.get(url).json()['conflicts'], [])
        self.assertEqual(HoleScore.objects.get(Entry=self.ann, HoleNumber=1).Strokes, 4)
