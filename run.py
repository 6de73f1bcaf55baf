"""
Ponto de Entrada do Portal Oficina do Aluno

Sobe o servidor de desenvolvimento do Flask com a API do painel
administrativo e do painel do professor. Em produção (Cloud Run) a
mesma factory é servida pelo gunicorn e a porta vem de $PORT.

$ python run.py
"""

import os

from src import create_app

app = create_app()

if __name__ == "__main__":
    porta = int(os.environ.get('PORT', '5000'))
    app.run(host='0.0.0.0', port=porta, debug=app.config['DEBUG'])
