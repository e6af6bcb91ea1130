"""Mock data loaded into the in-memory store when no database is configured."""

AGENTS = [
    {
        'id': '1',
        'first_name': 'Alexis',
        'last_name': 'Audic',
        'role': 'Responsable',
        'role_type': 'manager',
        'role_color': '#8b5cf6',
        'weekly_schedule': {
            'monday': '08:00-18:00',
            'tuesday': '08:00-18:00',
            'wednesday': '08:00-18:00',
            'thursday': '08:00-18:00',
            'friday': '08:00-18:00',
            'saturday': '09:00-17:00',
            'sunday': 'Repos',
        },
        'leave_dates': ['2024-01-15', '2024-01-16'],
        'status': 'active',
        'assigned_tasks': [],
        'manager_notes': "Responsable de l'équipe technique",
    },
    {
        'id': '2',
        'first_name': 'Pierre',
        'last_name': 'Martin',
        'role': 'Agent technique',
        'role_type': 'technical',
        'role_color': '#059669',
        'weekly_schedule': {
            'monday': '07:00-15:00',
            'tuesday': '07:00-15:00',
            'wednesday': '08:00-16:00',
            'thursday': '07:00-15:00',
            'friday': '07:00-15:00',
            'saturday': '08:00-12:00',
            'sunday': 'Repos',
        },
        'leave_dates': ['2024-01-20'],
        'status': 'active',
        'assigned_tasks': ['Maintenance électrique', 'Réparation plomberie'],
        'manager_notes': 'Spécialisé en électricité et plomberie',
    },
    {
        'id': '3',
        'first_name': 'Sophie',
        'last_name': 'Bernard',
        'role': "Agent d'entretien",
        'role_type': 'maintenance',
        'role_color': '#2563eb',
        'weekly_schedule': {
            'monday': '09:00-17:00',
            'tuesday': '09:00-17:00',
            'wednesday': '09:00-17:00',
            'thursday': '09:00-17:00',
            'friday': '09:00-17:00',
            'saturday': '10:00-14:00',
            'sunday': 'Repos',
        },
        'leave_dates': ['2024-01-25', '2024-01-26'],
        'status': 'active',
        'assigned_tasks': ['Nettoyage quotidien', 'Entretien espaces communs'],
        'manager_notes': "Très efficace pour l'entretien général",
    },
]

BUILDINGS = [
    {
        'id': '1',
        'name': 'Bâtiment A',
        'description': 'Bâtiment principal avec chambres et espaces communs',
        'color': '#3b82f6',
        'created_at': '2024-01-01T00:00:00Z',
        'rooms': [
            {'id': 'a1', 'name': 'Chambres 1-10', 'type': 'bedroom', 'agent_id': '3',
             'task': 'Nettoyage quotidien', 'notes': "Vérifier l'état des lits"},
            {'id': 'a2', 'name': 'Couloir principal', 'type': 'other', 'agent_id': '3',
             'task': 'Entretien', 'notes': 'Nettoyage sol et murs'},
            {'id': 'a3', 'name': 'Salle commune', 'type': 'common-room', 'agent_id': '2',
             'task': 'Maintenance électrique', 'notes': 'Vérifier éclairage et prises'},
        ],
    },
    {
        'id': '2',
        'name': 'Bâtiment B',
        'description': 'Bâtiment avec cuisine et réfectoire',
        'color': '#10b981',
        'created_at': '2024-01-01T00:00:00Z',
        'rooms': [
            {'id': 'b1', 'name': 'Chambres 11-20', 'type': 'bedroom', 'agent_id': '3',
             'task': 'Nettoyage quotidien'},
            {'id': 'b2', 'name': 'Cuisine', 'type': 'kitchen', 'agent_id': '2',
             'task': 'Vérification équipements', 'notes': 'Contrôle sécurité gaz et électricité'},
            {'id': 'b3', 'name': 'Réfectoire', 'type': 'common-room', 'agent_id': '3',
             'task': 'Nettoyage approfondi'},
        ],
    },
    {
        'id': '3',
        'name': 'Bâtiment C',
        'description': 'Bâtiment administratif et infirmerie',
        'color': '#f59e0b',
        'created_at': '2024-01-01T00:00:00Z',
        'rooms': [
            {'id': 'c1', 'name': 'Infirmerie', 'type': 'other', 'agent_id': '2',
             'task': 'Maintenance préventive', 'notes': 'Vérification équipements médicaux'},
            {'id': 'c2', 'name': 'Bureau direction', 'type': 'office', 'agent_id': '3',
             'task': 'Entretien'},
            {'id': 'c3', 'name': "Salle d'activités", 'type': 'common-room', 'agent_id': '2',
             'task': 'Vérification éclairage'},
        ],
    },
]

SETTINGS = {
    'id': 'settings',
    'colony_name': 'Colonie de Vacances',
    'address': '123 Rue de la Nature, 12345 Ville',
    'phone': '+33 1 23 45 67 89',
    'email': 'contact@colonie.fr',
}

INSTRUCTIONS = [
    'Vérifier les équipements avant chaque intervention',
    'Signaler immédiatement tout incident ou anomalie',
    "Respecter les horaires d'intervention dans chaque zone",
    "Maintenir la propreté et l'ordre dans les espaces communs",
]

COLLECTIONS = {
    'agent': AGENTS,
    'building': BUILDINGS,
    'settings': [SETTINGS, {'id': 'instructions', 'items': INSTRUCTIONS}],
}
