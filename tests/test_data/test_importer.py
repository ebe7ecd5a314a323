"""Tests for the play importer."""

import pytest
from unittest.mock import patch
from sqlalchemy.exc import SQLAlchemyError

from filmroom.data.config import ImportConfig
from filmroom.data.importer import PlayImporter, ImportResult, PlayMappingResult
from filmroom.data.adapters import NCAAApiAdapter
from filmroom.models import GameModel, PlayModel, ExternalGameModel, ExternalPlayModel
from filmroom.services.base import DatabaseError, NotFoundError, ValidationException
from filmroom.services.game_service import GameService


def ncaa_batch():
    return {
        'games': [{
            'id': 'g1', 'season': 2023, 'week': 13, 'home_team': 'Michigan', 'away_team': 'Ohio State',
            'home_score': 30, 'away_score': 24, 'date': '2023-11-25', 'venue': 'Michigan Stadium',
        }],
        'plays': [
            {'id': 'p1', 'quarter': 1, 'time': '15:00', 'play_type': 'Kickoff',
             'description': 'Kickoff 65 yards', 'offense': 'Ohio State', 'defense': 'Michigan'},
            {'id': 'p2', 'game_id': 'g1', 'quarter': 1, 'time': '14:21', 'down': 1, 'distance': 10,
             'yard_line': 75, 'play_type': 'Rush', 'description': 'Handoff for 4 yards',
             'offense': 'Michigan', 'defense': 'Ohio State'},
        ],
    }


@pytest.fixture
def importer(test_session):
    return PlayImporter(test_session)


class TestImportResult:
    def test_to_dict(self):
        result = ImportResult(total=2)
        result.imported = 1
        result.add_error("Play p2: bad")
        result.finish("Imported 1 of 2 plays")
        
        data = result.to_dict()
        
        assert data['success'] is True
        assert data['imported'] == 1
        assert data['total'] == 2
        assert data['errors'] == ["Play p2: bad"]
        assert data['duration_seconds'] >= 0
    
    def test_mapped_is_created_plus_already_mapped(self):
        result = PlayMappingResult(total=5)
        result.created = 2
        result.already_mapped = 3
        
        assert result.to_dict()['mapped'] == 5


class TestImportGames:
    """Test batch game imports through an adapter."""
    
    def test_import_batch(self, importer, test_session):
        result = importer.import_games('ncaa_api', ncaa_batch())
        
        assert result['success'] is True
        assert result['imported'] == 1
        assert result['plays_imported'] == 2
        assert result['plays_total'] == 2
        assert result['errors'] == []
        assert result['mapping_results'][0]['mapped'] is True
        
        game = test_session.query(ExternalGameModel).one()
        assert game.source == 'ncaa_api'
        assert game.external_id == 'g1'
        assert game.venue == 'Michigan Stadium'
        assert len(game.external_plays) == 2
    
    def test_reimport_updates_in_place(self, importer, test_session):
        importer.import_games('ncaa_api', ncaa_batch())
        batch = ncaa_batch()
        batch['games'][0]['home_score'] = 31
        
        importer.import_games('ncaa_api', batch)
        
        assert test_session.query(ExternalGameModel).count() == 1
        assert test_session.query(ExternalPlayModel).count() == 2
        assert test_session.query(ExternalGameModel).one().home_score == 31
    
    def test_multi_game_batch_groups_plays(self, importer, test_session):
        batch = ncaa_batch()
        batch['games'].append({'id': 'g2', 'home_team': 'Texas', 'away_team': 'Oklahoma', 'date': '2023-10-07'})
        batch['plays'][0]['game_id'] = 'g2'
        batch['plays'].append({'id': 'p9', 'game_id': 'g404', 'description': 'Lost play'})
        
        result = importer.import_games('ncaa_api', batch)
        
        assert result['imported'] == 2
        assert result['plays_imported'] == 2
        assert result['errors'] == ["Play p9: no game g404 in batch"]
        g2 = test_session.query(ExternalGameModel).filter_by(external_id='g2').one()
        assert [p.external_id for p in g2.external_plays] == ['p1']
    
    def test_bad_game_does_not_stop_batch(self, importer):
        batch = ncaa_batch()
        batch['games'].insert(0, {'home_team': 'No ID'})
        batch['plays'] = []
        
        result = importer.import_games('ncaa_api', batch)
        
        assert result['imported'] == 1
        assert result['total'] == 2
        assert result['errors'][0].startswith("Game at index 0")
    
    def test_unmapped_teams_are_reported(self, importer):
        batch = ncaa_batch()
        batch['games'][0]['away_team'] = 'Slippery Rock'
        
        result = importer.import_games('ncaa_api', batch)
        
        mapping = result['mapping_results'][0]
        assert result['imported'] == 1
        assert mapping['mapped'] is False
        assert mapping['suggested_teams'] == ['Slippery Rock']
    
    @pytest.mark.parametrize("data", [None, {}, {'games': 'nope'}])
    def test_games_required(self, importer, data):
        with pytest.raises(ValidationException, match="Games data is required"):
            importer.import_games('ncaa_api', data)
    
    def test_unknown_source(self, importer):
        with pytest.raises(ValidationException, match="Unknown source"):
            importer.import_games('hudl', ncaa_batch())
    
    def test_reimport_keeps_mapping(self, importer, test_session, michigan, ohio_state):
        importer.import_games('ncaa_api', ncaa_batch())
        game = test_session.query(ExternalGameModel).one()
        mapped = importer.map_plays(game.id, michigan.id, ohio_state.id)
        
        importer.import_games('ncaa_api', ncaa_batch())
        
        test_session.refresh(game)
        assert game.mapped_game_id == mapped['internal_game_id']


class TestImportExternalPlays:
    """Test storing raw plays under an external game."""
    
    def test_partial_import(self, importer, external_game, test_session):
        """Test that one failing play does not stop the batch."""
        plays = [
            {'id': f'p{i}', 'quarter': 1, 'time': '10:00', 'description': f'Run play number {i}',
             'offense': 'Michigan', 'defense': 'Ohio State'}
            for i in range(1, 11)
        ]
        original_upsert = importer.external_plays.upsert_play
        
        def flaky_upsert(external_game_id, play):
            if play.external_id == 'p5':
                raise DatabaseError("Failed to upsert ExternalPlayModel")
            return original_upsert(external_game_id, play)
        
        with patch.object(importer.external_plays, 'upsert_play', side_effect=flaky_upsert):
            result = importer.import_external_plays(external_game.id, plays, 'espn')
        
        assert result['success'] is True
        assert result['imported'] == 9
        assert result['total'] == 10
        assert len(result['errors']) == 1
        assert 'p5' in result['errors'][0]
        stored = {p.external_id for p in test_session.query(ExternalPlayModel).filter_by(external_game_id=external_game.id)}
        assert 'p5' not in stored
        assert {'p4', 'p6', 'p10'} <= stored
    
    def test_plays_are_standardized(self, importer, external_game, test_session):
        raw = {'id': 'n1', 'time': 'Q3 4:12', 'yardLine': '18', 'down': '2', 'distance': '7',
               'description': 'Shotgun pass complete to the 11'}
        
        result = importer.import_external_plays(external_game.id, [raw], 'espn')
        
        assert result['imported'] == 1
        play = test_session.query(ExternalPlayModel).filter_by(external_id='n1').one()
        assert play.quarter == 3
        assert play.time == '4:12'
        assert play.yard_line == 18
        assert play.play_type == 'PASS'
        assert play.source == 'espn'
        assert play.raw_data['yardLine'] == '18'
    
    def test_missing_play_id(self, importer, external_game):
        result = importer.import_external_plays(external_game.id, [{'description': 'No id'}])
        
        assert result['imported'] == 0
        assert result['errors'] == ["Play at index 0: missing play ID"]
    
    def test_reimport_is_an_update(self, importer, external_game, test_session):
        importer.import_external_plays(external_game.id, [{'id': 'p2', 'description': 'Corrected text'}])
        
        plays = test_session.query(ExternalPlayModel).filter_by(external_game_id=external_game.id).all()
        
        assert len(plays) == 3
        assert next(p for p in plays if p.external_id == 'p2').description == 'Corrected text'
    
    @pytest.mark.parametrize("game_id,plays", [(None, []), (1, None), (1, {'id': 'p1'})])
    def test_arguments_required(self, importer, game_id, plays):
        with pytest.raises(ValidationException, match="External game ID and plays array are required"):
            importer.import_external_plays(game_id, plays)
    
    def test_unknown_game(self, importer):
        with pytest.raises(NotFoundError):
            importer.import_external_plays(999, [])


class TestMapPlays:
    """Test mapping external plays onto internal plays."""
    
    def test_map_plays(self, importer, external_game, test_session, michigan, ohio_state):
        result = importer.map_plays(external_game.id, ohio_state.id, michigan.id)
        
        assert result['success'] is True
        assert result['created'] == 3
        assert result['mapped'] == 3
        assert result['already_mapped'] == 0
        assert result['game_created'] is True
        assert result['home_away'] == 'AWAY'
        
        game = test_session.get(GameModel, result['internal_game_id'])
        assert game.team_id == ohio_state.id
        assert game.team_score == 24
        assert game.opponent_score == 30
        assert game.season == 2023
        
        test_session.refresh(external_game)
        assert external_game.mapped_game_id == game.id
        
        plays = test_session.query(PlayModel).filter_by(game_id=game.id).order_by(PlayModel.id).all()
        assert [p.play_type for p in plays] == ['KICKOFF', 'RUSH', 'RUSH']
        assert plays[1].formation == 'SHOTGUN'
        sneak = plays[2]
        assert sneak.is_red_zone and sneak.is_goal_to_go and sneak.is_third_down
        assert sneak.points == 6
        assert sneak.success is True
    
    def test_home_team(self, importer, external_game, michigan, ohio_state):
        result = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        
        assert result['home_away'] == 'HOME'
    
    def test_home_away_default_when_unresolved(self, test_session, external_game, michigan, ohio_state):
        external_game.home_team = 'Slippery Rock'
        external_game.away_team = 'Mount Union'
        test_session.commit()
        importer = PlayImporter(test_session, ImportConfig(default_home_away='AWAY'))
        
        result = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        
        assert result['home_away'] == 'AWAY'
    
    def test_idempotent(self, importer, external_game, test_session, michigan, ohio_state):
        first = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        second = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        
        assert second['created'] == 0
        assert second['already_mapped'] == 3
        assert second['mapped'] == 3
        assert second['game_created'] is False
        assert second['internal_game_id'] == first['internal_game_id']
        assert test_session.query(PlayModel).count() == 3
        assert test_session.query(GameModel).count() == 1
    
    def test_failed_play_is_retried_on_rerun(self, importer, external_game, test_session, michigan, ohio_state):
        original_create = importer.plays.create_from_standardized
        
        def flaky_create(game_id, play, external_play=None):
            if play.id == 'p2':
                raise DatabaseError("Failed to create PlayModel")
            return original_create(game_id, play, external_play)
        
        with patch.object(importer.plays, 'create_from_standardized', side_effect=flaky_create):
            first = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        second = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        
        assert first['created'] == 2
        assert first['mapped'] == 2
        assert len(first['errors']) == 1
        assert second['created'] == 1
        assert second['already_mapped'] == 2
        assert test_session.query(PlayModel).count() == 3
    
    def test_failed_link_leaves_no_orphan_play(self, importer, external_game, test_session, michigan, ohio_state):
        """Test that a play whose mapping pointer fails to commit is rolled back."""
        real_commit = test_session.commit
        
        def failing_commit():
            if any(getattr(obj, 'external_id', None) == 'p2' for obj in test_session.dirty):
                raise SQLAlchemyError("disk I/O error")
            real_commit()
        
        with patch.object(test_session, 'commit', side_effect=failing_commit):
            first = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        
        assert first['created'] == 2
        assert len(first['errors']) == 1
        assert test_session.query(PlayModel).count() == 2
        p2 = test_session.query(ExternalPlayModel).filter_by(external_id='p2').one()
        assert p2.mapped_play_id is None
        
        second = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        
        assert second['created'] == 1
        assert second['already_mapped'] == 2
        assert test_session.query(PlayModel).count() == 3
    
    def test_invalid_external_game_is_validation_error(self, importer, external_game, test_session,
                                                       michigan, ohio_state):
        external_game.week = 40
        test_session.commit()
        
        with pytest.raises(ValidationException):
            importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        
        assert test_session.query(GameModel).count() == 0
    
    def test_deleted_internal_game_is_recreated(self, importer, external_game, test_session, michigan, ohio_state):
        first = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        GameService(test_session).delete(first['internal_game_id'])
        
        second = importer.map_plays(external_game.id, michigan.id, ohio_state.id)
        
        assert second['game_created'] is True
        assert second['created'] == 3
        assert test_session.query(GameModel).count() == 1
    
    @pytest.mark.parametrize("args", [(None, 1, 2), (1, None, 2), (1, 2, None)])
    def test_ids_required(self, importer, args):
        with pytest.raises(ValidationException, match="External game ID, team ID, and opponent ID are required"):
            importer.map_plays(*args)
    
    def test_unknown_team(self, importer, external_game, michigan):
        with pytest.raises(NotFoundError):
            importer.map_plays(external_game.id, michigan.id, 999)
    
    def test_unknown_external_game(self, importer, michigan, ohio_state):
        with pytest.raises(NotFoundError):
            importer.map_plays(999, michigan.id, ohio_state.id)


class TestValidateAndQuickImport:
    def test_validate_external_game(self, importer, external_game):
        report = importer.validate_external_game(external_game.id)
        
        assert report.plays_total == 3
        assert report.to_dict()['overall']['quality'] == 'excellent'
    
    def test_validate_requires_id(self, importer):
        with pytest.raises(ValidationException):
            importer.validate_external_game(None)
    
    def test_quick_import(self, importer, test_session):
        with patch.object(NCAAApiAdapter, 'build_import_payload', return_value=ncaa_batch()) as mock_build:
            result = importer.quick_import(3146430)
        
        mock_build.assert_called_once_with('3146430')
        assert result['imported'] == 1
        assert result['plays_imported'] == 2
        assert test_session.query(ExternalGameModel).one().source == 'ncaa_api'
    
    def test_quick_import_requires_id(self, importer):
        with pytest.raises(ValidationException, match="Game ID is required"):
            importer.quick_import('')
