"""
完整用户流程测试
测试：批量输入 -> 列表 -> AI 分析 -> 重新分析 -> 删除
"""
import json
import pytest
import allure


@allure.epic("端到端测试")
@allure.feature("完整流程")
@pytest.mark.e2e
@pytest.mark.integration
class TestCompleteFlow:

    def test_complete_user_flow(self, test_client, ai_client, chat_response, clock):
        """TC_FLOW_001: 输入 -> 分组列表 -> 分析 -> 覆盖分析 -> 删除"""

        # --- 步骤1: 前一天录入一个单词，今天用输入矩阵录入一个短语 ---
        clock.set(2025, 3, 1, 21)
        response = test_client.post('/vocab/create', json={'content': 'ubiquitous'})
        word_id = response.get_json()['data']['id']

        clock.set(2025, 3, 2, 8)
        response = test_client.post('/vocab/batch', json={'cells': ['a', 'piece', 'of', 'cake']})
        phrase_id = response.get_json()['data']['id']

        # --- 步骤2: 列表分成两天，今天在前 ---
        data = test_client.get('/vocab/list').get_json()['data']
        assert list(data.keys()) == ['2025-03-02', '2025-03-01']
        assert data['2025-03-02'][0]['content'] == 'a piece of cake'

        # --- 步骤3: 分析单词 ---
        first = {"pos": "adj.", "cn": "无处不在的", "etymology": "拉丁语 ubique",
                 "sentences": ["Phones are ubiquitous. | 手机无处不在。"], "tips": "ubi = where"}
        ai_client.create_completion.return_value = chat_response(
            "以下是分析结果：\n```json\n" + json.dumps(first, ensure_ascii=False) + "\n```"
        )
        response = test_client.post(f'/vocab/analyze/{word_id}')
        assert response.status_code == 200
        assert response.get_json()['data']['translation'] == '无处不在的'

        # --- 步骤4: 分析失败不影响已有结果 ---
        ai_client.create_completion.return_value = {"unexpected": True}
        response = test_client.post(f'/vocab/analyze/{word_id}')
        assert response.status_code == 400
        assert response.get_json()['msg'] == 'AI analysis failed: Unexpected AI response format'
        entry = test_client.get(f'/vocab/{word_id}').get_json()['data']
        assert entry['aiAnalysis'] == first

        # --- 步骤5: 重新分析覆盖旧结果 ---
        second = dict(first, cn="普遍存在的")
        ai_client.create_completion.return_value = chat_response(json.dumps(second, ensure_ascii=False))
        response = test_client.post(f'/vocab/analyze/{word_id}')
        assert response.get_json()['data']['translation'] == '普遍存在的'

        # --- 步骤6: 删除短语，只剩前一天的单词 ---
        assert test_client.delete(f'/vocab/{phrase_id}').status_code == 200
        data = test_client.get('/vocab/list').get_json()['data']
        assert list(data.keys()) == ['2025-03-01']
        assert [e['id'] for e in data['2025-03-01']] == [word_id]
