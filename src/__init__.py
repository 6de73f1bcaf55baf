"""
Módulo Principal da Aplicação (Application Factory)
"""

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix # Importação necessária para o Cloud Run
from config import Config

from .core import database
from .core.extensions import csrf, limiter
from .core.sessao import ObservadorSessao, registrar_transicao

def create_app(config_class=Config):
    """
    Cria e configura uma instância da aplicação Flask.
    """

    app = Flask(__name__, instance_relative_config=True)

    # === CORREÇÃO HTTPS (Cloud Run) ===
    # Ajusta o Flask para entender que está atrás de um Proxy (Cloud Run)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # 1. Carrega a configuração
    app.config.from_object(config_class)
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    # 2. Inicializa as extensões
    database.init_app(app)
    limiter.init_app(app)
    csrf.init_app(app)

    # 3. Observador do estado de sessão (injetado, não global)
    observador = ObservadorSessao()
    observador.inscrever(registrar_transicao)
    app.extensions['sessao'] = observador

    # 4. Configura os Blueprints (Módulos)

    # Módulo de Autenticação
    from .auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/')

    # Módulo Admin
    # O url_prefix='/admin' já está definido dentro do admin/__init__.py
    from .admin import admin_bp
    app.register_blueprint(admin_bp)

    # Módulo do Professor (url_prefix='/professor')
    from .professor import professor_bp
    app.register_blueprint(professor_bp)

    # 5. Rota de Health Check
    @app.route("/health")
    def health_check():
        return "Servidor Oficina do Aluno no ar!", 200

    # 6. Erros HTTP em JSON
    @app.errorhandler(404)
    def pagina_nao_encontrada(e):
        return jsonify({'error': 'Página não encontrada'}), 404

    @app.errorhandler(405)
    def metodo_nao_permitido(e):
        return jsonify({'error': 'Método não permitido'}), 405

    return app
