"""
Tests for the command-line entry point.
"""

import pytest
import io
import json
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pandas as pd

from textmap.__main__ import build_overrides, main, parse_args, read_texts


class TestReadTexts:
    """Tests for input reading."""

    def test_text_file(self, tmp_path):
        path = tmp_path / "comments.txt"
        path.write_text("premier\n\n  \ndeuxième\n", encoding='utf-8')

        assert read_texts(str(path)) == ["premier", "deuxième"]

    def test_csv_column(self, tmp_path):
        path = tmp_path / "comments.csv"
        pd.DataFrame({'author': ['a', 'b'], 'text': ['un', 'NA']}).to_csv(path, index=False)

        assert read_texts(str(path), 'text') == ['un', 'NA']
        assert read_texts(str(path)) == ['a', 'b']

    def test_csv_missing_column(self, tmp_path):
        path = tmp_path / "comments.csv"
        pd.DataFrame({'text': ['un']}).to_csv(path, index=False)

        with pytest.raises(KeyError):
            read_texts(str(path), 'body')


class TestArguments:
    """Tests for argument handling."""

    def test_overrides(self):
        args = parse_args(['in.txt', '--k', '4', '--seed', '7', '--clean', 'lowercase, punctuation'])
        overrides = build_overrides(args)

        assert overrides['kmeans'] == {'k': 4, 'seed': 7}
        assert overrides['split'] == {'seed': 7}
        assert overrides['cleaning'] == {'steps': ['lowercase', 'punctuation']}
        assert 'pca' not in overrides

    def test_config_file_then_flags(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("kmeans:\n  k: 6\n  max-iters: 20\n")

        overrides = build_overrides(parse_args(['in.txt', '--config', str(path), '--k', '2']))

        assert overrides['kmeans'] == {'k': 2, 'max-iters': 20}


class TestMain:
    """Tests for the main function."""

    def write_corpus(self, tmp_path, lines):
        path = tmp_path / "comments.txt"
        path.write_text("\n".join(lines) + "\n", encoding='utf-8')
        return str(path)

    def test_json_output(self, tmp_path, capsys, french_comments):
        path = self.write_corpus(tmp_path, french_comments)

        code = main([path, '--k', '2', '--seed', '0', '--clean', 'lowercase,punctuation'])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output['summary']['n_documents'] == 10
        assert output['summary']['n_components'] == 2
        assert len(output['documents']) == 10
        assert {d['cluster'] for d in output['documents']} <= {0, 1}

    def test_reproducible(self, tmp_path, capsys, french_comments):
        path = self.write_corpus(tmp_path, french_comments)

        main([path, '--seed', '1'])
        first = capsys.readouterr().out
        main([path, '--seed', '1'])
        second = capsys.readouterr().out

        assert first == second

    def test_csv_output(self, tmp_path, capsys, french_comments):
        path = self.write_corpus(tmp_path, french_comments)

        code = main([path, '--k', '2', '--seed', '0', '--format', 'csv'])

        assert code == 0
        out = capsys.readouterr().out
        assert out.splitlines()[0] == '"Original Text","Cleaned Text","Set","Cluster ID"'

        frame = pd.read_csv(io.StringIO(out), keep_default_na=False)
        assert len(frame) == 10
        assert frame['Original Text'].tolist() == french_comments
        assert set(frame['Set']) <= {'Train', 'Test'}
        assert set(frame['Cluster ID']) <= {0, 1}

    def test_output_file(self, tmp_path, capsys, french_comments):
        path = self.write_corpus(tmp_path, french_comments)
        json_path = tmp_path / "result.json"
        csv_path = tmp_path / "cleaned_data.csv"

        assert main([path, '--seed', '0', '--output', str(json_path)]) == 0
        assert main([path, '--seed', '0', '--format', 'csv', '--output', str(csv_path)]) == 0

        assert capsys.readouterr().out == ""
        assert len(json.loads(json_path.read_text(encoding='utf-8'))['documents']) == 10
        assert len(pd.read_csv(csv_path)) == 10

    def test_no_documents(self, tmp_path, capsys):
        path = self.write_corpus(tmp_path, ["   "])

        assert main([path]) == 1
        assert capsys.readouterr().out == ""
