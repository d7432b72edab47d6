from django.urls import path
from SWMG import views

urlpatterns = [
    # scoring / sync
    path('api/scores', views.submit_score_view, name='submit_score_view'),
    path('api/hole-scores/batch', views.submit_score_batch_view, name='submit_score_batch_view'),
    path('api/entries/<int:entry_id>/scores', views.entry_scores_view, name='entry_scores_view'),
    path('api/groups/<int:group_id>/scores', views.group_scores_view, name='group_scores_view'),
    # results
    path('api/tournaments/<int:tournament_id>/leaderboards', views.leaderboards_view, name='leaderboards_view'),
    path('api/tournaments/<int:tournament_id>/skins', views.skins_view, name='skins_view'),
    # conflict review
    path('api/tournaments/<int:tournament_id>/conflicts', views.conflicts_view, name='conflicts_view'),
    path('api/conflicts/<int:conflict_id>/resolve', views.conflict_resolve_view, name='conflict_resolve_view'),
]
